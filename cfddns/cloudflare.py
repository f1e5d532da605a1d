"""Asynchronous client for the parts of the Cloudflare DNS API used by the updater."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

API_BASE = "https://api.cloudflare.com/client/v4"
DEFAULT_TTL = 300

log = logging.getLogger(__name__)


class CloudflareError(Exception):
    """Raised when a Cloudflare API call fails or returns an unusable answer."""


@dataclass
class DnsRecord:
    """A single DNS record as exchanged with the API."""

    record_type: str
    name: str
    content: str
    ttl: int = DEFAULT_TTL
    id: str | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the record as the JSON object the API expects."""
        return {
            "id": self.id,
            "type": self.record_type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
        }

    @classmethod
    def from_json(cls, data: Any) -> "DnsRecord":
        """Build a record from an API JSON object."""
        try:
            record_id = data.get("id")
            return cls(
                record_type=str(data["type"]),
                name=str(data["name"]),
                content=str(data["content"]),
                ttl=int(data["ttl"]),
                id=None if record_id is None else str(record_id),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise CloudflareError(f"Malformed DNS record: {data!r}") from exc


class CloudflareClient:
    """Talks to the Cloudflare v4 API with a bearer token."""

    def __init__(self, token: str, client: httpx.AsyncClient | None = None,
                 base_url: str = API_BASE) -> None:
        self._token = token
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()
        self._base_url = base_url.rstrip("/")

    async def __aenter__(self) -> "CloudflareClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, *,
                       params: dict[str, str] | None = None,
                       body: dict[str, Any] | None = None) -> Any:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.request(
                method,
                f"{self._base_url}{path}",
                params=params,
                headers=headers,
                content=None if body is None else json.dumps(body),
            )
        except httpx.HTTPError as exc:
            raise CloudflareError(f"Request to Cloudflare failed: {exc}") from exc

        text = response.text
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CloudflareError(f"Failed to parse response: {exc}, body: {text}") from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("success"), bool):
            raise CloudflareError(f"Failed to parse response: unexpected shape, body: {text}")

        if not payload["success"]:
            errors = payload.get("errors") or []
            detail = ", ".join(
                f"Code {err.get('code')}: {err.get('message')}"
                for err in errors
                if isinstance(err, dict)
            )
            raise CloudflareError(f"Cloudflare API error: {detail}")

        result = payload.get("result")
        if result is None:
            raise CloudflareError("No result in response")
        return result

    async def get_zone_id(self, domain: str) -> str:
        """Return the id of the zone whose name is exactly ``domain``."""
        zones = await self._request("GET", "/zones", params={"name": domain})
        if not isinstance(zones, list):
            raise CloudflareError(f"Unexpected zone list: {zones!r}")
        for zone in zones:
            if isinstance(zone, dict) and zone.get("name") == domain and "id" in zone:
                return str(zone["id"])
        raise CloudflareError(f"Zone not found for domain: {domain}")

    async def get_dns_record(self, zone_id: str, name: str, record_type: str) -> DnsRecord | None:
        """Return the first record matching name and type, or None."""
        records = await self._request(
            "GET", f"/zones/{zone_id}/dns_records",
            params={"name": name, "type": record_type},
        )
        if not isinstance(records, list):
            raise CloudflareError(f"Unexpected record list: {records!r}")
        return DnsRecord.from_json(records[0]) if records else None

    async def create_dns_record(self, zone_id: str, name: str, record_type: str,
                                content: str) -> DnsRecord:
        """Create a record and return what the API stored."""
        record = DnsRecord(record_type=record_type, name=name, content=content)
        result = await self._request("POST", f"/zones/{zone_id}/dns_records",
                                     body=record.to_json())
        return DnsRecord.from_json(result)

    async def update_dns_record(self, zone_id: str, record_id: str, name: str,
                                record_type: str, content: str) -> DnsRecord:
        """Replace an existing record and return what the API stored."""
        record = DnsRecord(record_type=record_type, name=name, content=content, id=record_id)
        result = await self._request("PUT", f"/zones/{zone_id}/dns_records/{record_id}",
                                     body=record.to_json())
        return DnsRecord.from_json(result)

    async def update_or_create_record(self, zone_id: str, name: str, record_type: str,
                                      content: str) -> None:
        """Make the record hold ``content``, creating it if missing."""
        existing = await self.get_dns_record(zone_id, name, record_type)
        if existing is None:
            log.info("Creating new %s record for %s with content %s", record_type, name, content)
            await self.create_dns_record(zone_id, name, record_type, content)
            log.info("Successfully created %s record for %s", record_type, name)
            return
        if existing.content == content:
            log.info("%s record for %s is already up to date", record_type, name)
            return
        if existing.id is None:
            raise CloudflareError(f"Existing {record_type} record for {name} has no id")
        log.info("Updating %s record for %s from %s to %s",
                 record_type, name, existing.content, content)
        await self.update_dns_record(zone_id, existing.id, name, record_type, content)
        log.info("Successfully updated %s record for %s", record_type, name)