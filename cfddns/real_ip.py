"""Discovery of the host's public IPv4 and IPv6 addresses via public echo services."""

from __future__ import annotations

import ipaddress
import json
import logging

import httpx

IPV4_SERVICES = (
    "https://api.ipify.org?format=json",
    "https://ipinfo.io/ip",
    "https://icanhazip.com",
    "https://checkip.amazonaws.com",
)

IPV6_SERVICES = (
    "https://api64.ipify.org?format=json",
    "https://ipv6.icanhazip.com",
    "https://v6.ident.me",
)

log = logging.getLogger(__name__)


class IpLookupError(Exception):
    """Raised when no public address could be determined."""


async def get_ip_from_service(client: httpx.AsyncClient, url: str) -> str:
    """Ask one service for the public address; accepts JSON ``{"ip": ...}`` or plain text."""
    response = await client.get(url)
    text = response.text

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("ip"), str):
        return payload["ip"]

    candidate = text.strip()
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        raise IpLookupError(f"Failed to parse IP from response: {text}") from None
    return candidate


async def _first_answer(client: httpx.AsyncClient | None, services: tuple[str, ...],
                        family: str) -> str:
    if client is None:
        async with httpx.AsyncClient() as own_client:
            return await _first_answer(own_client, services, family)

    for service in services:
        log.debug("Trying %s service: %s", family, service)
        try:
            ip = await get_ip_from_service(client, service)
        except (httpx.HTTPError, IpLookupError) as exc:
            log.warning("Failed to get %s from %s: %s", family, service, exc)
            continue
        log.info("Successfully got %s from %s: %s", family, service, ip)
        return ip
    raise IpLookupError(f"All {family} services failed")


async def get_ipv4(client: httpx.AsyncClient | None = None) -> str:
    """Return the public IPv4 address, trying each service in turn."""
    return await _first_answer(client, IPV4_SERVICES, "IPv4")


async def get_ipv6(client: httpx.AsyncClient | None = None) -> str:
    """Return the public IPv6 address, trying each service in turn."""
    return await _first_answer(client, IPV6_SERVICES, "IPv6")