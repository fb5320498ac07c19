"""Read territory tables and area manifests from disk or over HTTP."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

from territory_rules.common.constants import FALLBACK_AREAS
from territory_rules.common.errors import SourceError
from territory_rules.common.fs import read_json, read_text
from territory_rules.common.http import HttpClient, HttpRequestError
from territory_rules.common.logging import get_logger, log_event


def is_url(location: str) -> bool:
    return urlparse(location).scheme in {"http", "https"}


def read_territory_text(location: str | Path, http_client: HttpClient | None = None) -> str:
    location = str(location)
    if is_url(location):
        owns_client = http_client is None
        client = http_client or HttpClient()
        try:
            return client.get_text(location)
        finally:
            if owns_client:
                client.close()

    path = Path(location)
    if not path.exists():
        raise SourceError(f"Territory table not found: {path}")
    return read_text(path)


def _fetch_manifest(location: str, http_client: HttpClient | None):
    if is_url(location):
        owns_client = http_client is None
        client = http_client or HttpClient()
        try:
            return client.get_json(location)
        except HttpRequestError as exc:
            if exc.status_code == 404:
                return None
            raise
        finally:
            if owns_client:
                client.close()

    path = Path(location)
    if not path.exists():
        return None
    return read_json(path)


def load_area_manifest(
    location: str | Path,
    http_client: HttpClient | None = None,
    *,
    fallback: tuple[str, ...] | list[str] = FALLBACK_AREAS,
    logger: logging.Logger | None = None,
) -> list[str]:
    """Return the postcode areas listed in a manifest, or ``fallback`` when it is missing or empty."""
    logger = logger or get_logger("sources")
    payload = _fetch_manifest(str(location), http_client)
    areas = []
    if isinstance(payload, list):
        areas = [str(area).strip() for area in payload if str(area).strip()]
    if not areas:
        log_event(
            logger,
            f"area manifest unavailable at {location}; using fallback areas",
            level=logging.WARNING,
            stage="load",
            event="MANIFEST_FALLBACK",
            status="fallback",
        )
        return list(fallback)
    return areas
