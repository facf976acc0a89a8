"""
GBIF API client.

Low-level HTTP access to the GBIF v1 API. Translates transport and HTTP
failures into the pipeline's error types so callers only deal with
``SourceUnavailable`` and ``QuotaExceeded``.

API docs: https://techdocs.gbif.org/en/openapi/v1/occurrence
Paging: ``limit`` <= 300 per page, ``offset + limit`` <= 100 000.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from occurrence_cleaner.config import get_settings
from occurrence_cleaner.exceptions import QuotaExceeded, SourceUnavailable
from occurrence_cleaner.services.http import session

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://api.gbif.org/v1"
MAX_PAGE_SIZE = 300  # API maximum for /occurrence/search
MAX_RESULTS = 100_000  # offset + limit ceiling for search paging


def _get(endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Make a GET request to the GBIF API, mapping failures to pipeline errors."""
    url = f"{API_BASE}/{endpoint}"
    try:
        resp = session.get(url, params=params or {}, timeout=get_settings().http_timeout)
    except requests.RequestException as exc:
        raise SourceUnavailable(f"GBIF request to {endpoint} failed: {exc}") from exc

    if resp.status_code == 429:
        raise QuotaExceeded(f"GBIF rate limit hit on {endpoint} (HTTP 429)")
    try:
        resp.raise_for_status()
    except requests.HTTPError as exc:
        raise SourceUnavailable(f"GBIF returned HTTP {resp.status_code} for {endpoint}") from exc

    try:
        data: dict[str, Any] = resp.json()
    except ValueError as exc:
        raise SourceUnavailable(f"GBIF returned a non-JSON body for {endpoint}") from exc
    return data


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def search_occurrences(params: dict[str, Any]) -> dict[str, Any]:
    """GET /occurrence/search: one page of occurrence records."""
    return _get("occurrence/search", params)


def match_species(params: dict[str, Any]) -> dict[str, Any]:
    """GET /species/match: fuzzy match a name against the GBIF backbone."""
    return _get("species/match", params)
