"""Occurrence search and taxon matching against GBIF."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pandas as pd

from occurrence_cleaner.cleaning.projection import OCCURRENCE_COLUMNS
from occurrence_cleaner.datasources.gbif import client
from occurrence_cleaner.exceptions import FetchCancelled, QuotaExceeded
from occurrence_cleaner.schemas import Taxon

logger = logging.getLogger(__name__)


# =============================================================================
# Taxon matching
# =============================================================================


def match_taxon(name: str, *, strict: bool = False) -> Taxon | None:
    """
    Resolve a scientific name to a GBIF backbone taxon.

    Args:
        name: Scientific name, e.g. ``"Panthera onca"``.
        strict: Only accept exact matches (no fuzzy or higher-rank fallback).

    Returns:
        The matched Taxon, or None if GBIF has no match.
    """
    data = client.match_species({"name": name, "strict": str(strict).lower()})
    match_type = data.get("matchType", "NONE")
    if match_type == "NONE" or "usageKey" not in data:
        logger.info("No GBIF backbone match for %r", name)
        return None

    return Taxon(
        key=data["usageKey"],
        scientific_name=data.get("scientificName", name),
        canonical_name=data.get("canonicalName"),
        rank=data.get("rank"),
        family=data.get("family"),
        match_type=match_type,
        confidence=data.get("confidence"),
    )


# =============================================================================
# Occurrence search
# =============================================================================


def fetch_occurrence_records(
    species: str,
    limit: int,
    *,
    require_coords: bool = True,
    taxon_key: int | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> list[dict[str, Any]]:
    """
    Page through ``/occurrence/search`` and return raw record dicts.

    Args:
        species: Scientific name (used when ``taxon_key`` is not given).
        limit: Maximum number of records to return.
        require_coords: Only request georeferenced records (``hasCoordinate``).
        taxon_key: GBIF backbone key; takes precedence over ``species``.
        should_cancel: Checked before each page; returning True aborts the fetch.

    Raises:
        QuotaExceeded: ``limit`` is beyond the search API's paging ceiling.
        FetchCancelled: ``should_cancel`` returned True.
    """
    if limit > client.MAX_RESULTS:
        msg = f"limit={limit} exceeds GBIF search ceiling of {client.MAX_RESULTS} records"
        raise QuotaExceeded(msg)

    base_params: dict[str, Any] = {}
    if taxon_key is not None:
        base_params["taxonKey"] = taxon_key
    else:
        base_params["scientificName"] = species
    if require_coords:
        base_params["hasCoordinate"] = "true"

    records: list[dict[str, Any]] = []
    offset = 0
    while len(records) < limit:
        if should_cancel is not None and should_cancel():
            msg = f"Fetch for {species!r} cancelled after {len(records)} record(s)"
            raise FetchCancelled(msg)

        page_size = min(client.MAX_PAGE_SIZE, limit - len(records))
        data = client.search_occurrences({**base_params, "limit": page_size, "offset": offset})
        results: list[dict[str, Any]] = data.get("results", [])
        records.extend(results)
        logger.debug("Fetched %d records at offset %d", len(results), offset)

        if not results or data.get("endOfRecords", True):
            break
        offset += len(results)

    return records[:limit]


def fetch_occurrences(
    species: str,
    limit: int,
    *,
    require_coords: bool = True,
    taxon_key: int | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> pd.DataFrame:
    """
    Fetch occurrences for a taxon as a flat table, one row per record.

    Zero matches return an empty frame with the projected columns so later
    stages see a consistent schema.
    """
    records = fetch_occurrence_records(
        species,
        limit,
        require_coords=require_coords,
        taxon_key=taxon_key,
        should_cancel=should_cancel,
    )
    logger.info("Fetched %d GBIF record(s) for %r", len(records), species)
    return records_to_frame(records)


def records_to_frame(records: list[dict[str, Any]]) -> pd.DataFrame:
    """Build a DataFrame from raw GBIF record dicts."""
    if not records:
        return pd.DataFrame(columns=list(OCCURRENCE_COLUMNS))
    return pd.DataFrame.from_records(records)
