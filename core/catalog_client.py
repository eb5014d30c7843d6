"""
App Store lookup client resolving catalog identifiers into app metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from app_monitor_core.app_monitor_core import logger as app_logger

_LOGGER = app_logger.get_logger()

DEFAULT_LOOKUP_URL = "https://itunes.apple.com/lookup"
DEFAULT_TIMEOUT_SECONDS = 10.0
UNKNOWN_APP_NAME = "Unknown App"


class CatalogLookupError(RuntimeError):
    """Raised when the lookup service cannot produce metadata for an identifier."""


@dataclass(frozen=True, slots=True)
class AppMetadata:
    catalog_id: int
    display_name: str
    vendor_name: str
    icon_url: Optional[str]
    package_id: str


def parse_lookup_response(catalog_id: int, payload: Any) -> AppMetadata:
    """
    Build AppMetadata from the first entry of a lookup response.

    Missing display fields fall back to neutral values; a response without
    any result entry is an error.
    """
    if not isinstance(payload, dict):
        raise CatalogLookupError("Lookup response root must be a JSON object.")
    results = payload.get("results")
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        raise CatalogLookupError(f"Lookup returned no results for {catalog_id}.")

    entry: Dict[str, Any] = results[0]
    icon_url = entry.get("artworkUrl512")
    if not isinstance(icon_url, str) or not icon_url.strip():
        icon_url = None
    return AppMetadata(
        catalog_id=catalog_id,
        display_name=_string_field(entry, "trackName") or UNKNOWN_APP_NAME,
        vendor_name=_string_field(entry, "artistName"),
        icon_url=icon_url,
        package_id=_string_field(entry, "bundleId"),
    )


def _string_field(entry: Dict[str, Any], name: str) -> str:
    value = entry.get(name)
    return value.strip() if isinstance(value, str) else ""


class CatalogClient:
    """Issues lookups and icon downloads over a shared httpx client."""

    def __init__(
        self,
        *,
        lookup_url: str = DEFAULT_LOOKUP_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self.lookup_url = lookup_url
        self._client = client or httpx.Client(follow_redirects=True, timeout=timeout)

    def lookup(self, catalog_id: int) -> AppMetadata:
        """Fetch metadata for ``catalog_id``. Raises CatalogLookupError on any failure."""
        _LOGGER.debug("Fetching app details for {} from {}", catalog_id, self.lookup_url)
        try:
            response = self._client.get(self.lookup_url, params={"id": catalog_id})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise CatalogLookupError(f"Lookup request for {catalog_id} failed: {exc}") from exc
        except ValueError as exc:
            raise CatalogLookupError(f"Lookup response for {catalog_id} is not JSON: {exc}") from exc

        metadata = parse_lookup_response(catalog_id, payload)
        _LOGGER.debug(
            "App found: {} (bundle={}, icon={})",
            metadata.display_name,
            metadata.package_id or "unknown",
            metadata.icon_url or "none",
        )
        return metadata

    def download_icon(self, url: str, destination: Path) -> Optional[Path]:
        """Best-effort icon download. Returns the written path, or None on failure."""
        tmp_path = destination.with_name(destination.name + ".tmp")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with tmp_path.open("wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
            tmp_path.replace(destination)
        except (httpx.HTTPError, OSError) as exc:
            _LOGGER.warning("Icon download from {} failed: {}", url, exc)
            tmp_path.unlink(missing_ok=True)
            return None
        return destination

    def close(self) -> None:
        self._client.close()
