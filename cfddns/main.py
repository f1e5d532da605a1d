"""The DDNS update loop and its command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import random
import signal
from contextlib import AsyncExitStack

import httpx

from cfddns.cloudflare import CloudflareClient, CloudflareError
from cfddns.config import Config, ConfigError, load_config
from cfddns.real_ip import IpLookupError, get_ipv4, get_ipv6

DEFAULT_WAIT_RANGE = (1, 300)

log = logging.getLogger(__name__)


async def check_once(config: Config, cf_client: CloudflareClient,
                     http_client: httpx.AsyncClient, zone_id: str,
                     stop_event: asyncio.Event) -> bool:
    """Update the enabled A/AAAA records once.

    Returns False if a stop was requested before the check could finish.
    """
    families = (
        (config.ipv4, "IPv4", "A", get_ipv4),
        (config.ipv6, "IPv6", "AAAA", get_ipv6),
    )
    for enabled, family, record_type, lookup in families:
        if not enabled:
            continue
        if stop_event.is_set():
            return False
        try:
            ip = await lookup(http_client)
        except IpLookupError as exc:
            log.error("Failed to get %s: %s", family, exc)
            continue
        log.info("Current %s: %s", family, ip)
        try:
            await cf_client.update_or_create_record(zone_id, config.domain, record_type, ip)
        except CloudflareError as exc:
            log.error("Failed to update %s record: %s", family, exc)
    return True


async def _sleep_or_stop(stop_event: asyncio.Event, seconds: float) -> bool:
    """Sleep for ``seconds``; return True if the stop event cut the sleep short."""
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


async def run(config: Config, stop_event: asyncio.Event | None = None,
              cf_client: CloudflareClient | None = None,
              http_client: httpx.AsyncClient | None = None,
              wait_range: tuple[int, int] = DEFAULT_WAIT_RANGE) -> None:
    """Keep the DNS records current until ``stop_event`` is set."""
    if stop_event is None:
        stop_event = asyncio.Event()

    if not config.is_complete():
        log.error("Missing required configuration: token, domain and root_domain must be set")
        return

    async with AsyncExitStack() as stack:
        if cf_client is None:
            cf_client = CloudflareClient(config.token)
            stack.push_async_callback(cf_client.aclose)
        if http_client is None:
            http_client = httpx.AsyncClient()
            stack.push_async_callback(http_client.aclose)

        try:
            zone_id = await cf_client.get_zone_id(config.root_domain)
        except CloudflareError as exc:
            log.error("Failed to get zone ID for root domain %s: %s", config.root_domain, exc)
            return
        log.info("Found zone ID: %s for root domain: %s", zone_id, config.root_domain)
        log.info("Starting DDNS client (Press Ctrl+C to stop gracefully)")

        while True:
            if stop_event.is_set():
                log.info("Graceful shutdown initiated, stopping DDNS client...")
                break
            log.info("Checking for IP changes")
            if not await check_once(config, cf_client, http_client, zone_id, stop_event):
                break
            wait_seconds = random.randint(*wait_range)
            log.info("Waiting %d seconds before next check", wait_seconds)
            if await _sleep_or_stop(stop_event, wait_seconds):
                log.info("Sleep interrupted by shutdown signal")
                break

    log.info("DDNS client stopped gracefully")


async def _serve(config: Config) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []

    def request_stop(label: str) -> None:
        log.info("Received %s, initiating graceful shutdown...", label)
        stop_event.set()

    for sig, label in ((signal.SIGINT, "SIGINT (Ctrl+C)"), (signal.SIGTERM, "SIGTERM")):
        try:
            loop.add_signal_handler(sig, request_stop, label)
        except (NotImplementedError, RuntimeError):
            continue
        installed.append(sig)
    try:
        await run(config, stop_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _configure_logging() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Load the configuration and run the updater until a stop signal arrives."""
    parser = argparse.ArgumentParser(
        prog="cfddns",
        description="Keep Cloudflare A/AAAA records pointed at this host's public address. "
                    "Settings come from config.json and environment variables.",
    )
    parser.parse_args(argv)
    _configure_logging()

    try:
        config = load_config()
    except ConfigError as exc:
        log.error("Failed to load configuration: %s", exc)
        return 1
    log.info("Config loaded: %r", config)

    asyncio.run(_serve(config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())