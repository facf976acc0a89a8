"""
Prefect flow for fetching and cleaning GBIF occurrences.

Run locally:
    python -m occurrence_cleaner.flows.clean "Panthera onca"

Run with Prefect dashboard:
    prefect server start &
    python -m occurrence_cleaner.flows.clean "Panthera onca"
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pandas as pd
from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from occurrence_cleaner.cleaning import CleaningResult, run_cleaning
from occurrence_cleaner.config import get_settings
from occurrence_cleaner.datasources import gbif
from occurrence_cleaner.schemas import RunConfig
from occurrence_cleaner.store import DataStore

# Data store rooted at the configured data directory
store = DataStore(get_settings().data_dir)

GBIF_SOURCE = "api.gbif.org"


def raw_path(config: RunConfig) -> Path:
    """Cache path of the raw fetch; the limit and coordinate flag are part of the key."""
    coords = "coords" if config.require_coords else "all"
    return Path(f"raw/{config.slug}_{config.limit}_{coords}.json")


def table_path(config: RunConfig, name: str) -> Path:
    return Path(f"derived/{config.slug}/{name}.csv")


def summary_path(config: RunConfig) -> Path:
    return Path(f"derived/{config.slug}/summary.json")


@task(name="match-taxon", retries=1, retry_delay_seconds=10)
def match_taxon(species: str) -> int | None:
    """Resolve the species name to a GBIF backbone key (None if unmatched)."""
    taxon = gbif.match_taxon(species)
    if taxon is None:
        print(f"No GBIF backbone match for {species!r}; searching by name.")
        return None
    print(f"Matched {species!r} to {taxon.scientific_name} (key {taxon.key}, {taxon.match_type})")
    return taxon.key


@task(name="fetch-occurrences", retries=1, retry_delay_seconds=30)
def fetch_occurrences(config: RunConfig, taxon_key: int | None = None) -> list[dict[str, Any]]:
    """Fetch raw occurrence records from GBIF."""
    return gbif.fetch_occurrence_records(
        config.species,
        config.limit,
        require_coords=config.require_coords,
        taxon_key=taxon_key,
    )


@task(name="save-raw")
def save_raw(config: RunConfig, records: list[dict[str, Any]], taxon_key: int | None) -> Path:
    """Cache raw records via store."""
    ttl = timedelta(hours=get_settings().cache_ttl_hours)
    return store.write(
        raw_path(config),
        records,
        source=GBIF_SOURCE,
        valid_until=datetime.now(UTC) + ttl,
        species=config.species,
        limit=config.limit,
        require_coords=config.require_coords,
        taxon_key=taxon_key,
    )


@task(name="clean-occurrences", cache_policy=NO_CACHE)
def clean_occurrences(config: RunConfig, raw: pd.DataFrame) -> CleaningResult:
    """Run projection, coordinate flags and quality filters."""
    return run_cleaning(raw, config)


@task(name="save-tables", cache_policy=NO_CACHE)
def save_tables(config: RunConfig, result: CleaningResult) -> dict[str, Path]:
    """Write clean/flagged/rejected tables and the run summary."""
    paths: dict[str, Path] = {}
    for name, df in (
        ("clean", result.clean),
        ("flagged", result.flagged),
        ("rejected", result.rejected),
    ):
        paths[name] = store.write_table(
            table_path(config, name),
            df,
            source=GBIF_SOURCE,
            species=config.species,
        )
    paths["summary"] = store.write(
        summary_path(config),
        result.summary(),
        source=GBIF_SOURCE,
        species=config.species,
        config=config.model_dump(mode="json"),
    )
    return paths


@flow(name="clean-occurrences", log_prints=True)
def clean_all(config: RunConfig) -> dict[str, Any]:
    """
    Fetch (or reuse cached) records for one taxon and clean them.

    This is the main Prefect flow for the data side. A fresh raw cache skips
    the network entirely.
    """
    cache = raw_path(config)
    if store.is_fresh(cache):
        print(f"Raw GBIF data for {config.species!r} is fresh, skipping fetch.")
        records: list[dict[str, Any]] = store.read(cache) or []
    else:
        print(f"Fetching up to {config.limit} GBIF records for {config.species!r}...")
        taxon_key = match_taxon(config.species)
        records = fetch_occurrences(config, taxon_key)
        raw_file = save_raw(config, records, taxon_key)
        print(f"Saved {len(records)} raw records to {raw_file}")

    result = clean_occurrences(config, gbif.records_to_frame(records))
    for warning in result.warnings:
        print(f"Warning: {warning}")

    paths = save_tables(config, result)
    print(
        f"Clean: {len(result.clean)}, flagged: {len(result.flagged)}, "
        f"rejected: {len(result.rejected)} -> {paths['clean'].parent}"
    )
    return {
        "species": config.species,
        "fetched": len(records),
        "clean": len(result.clean),
        "flagged": len(result.flagged),
        "rejected": len(result.rejected),
        "output": str(paths["clean"].parent),
    }


if __name__ == "__main__":
    species = " ".join(sys.argv[1:]) or None
    summary = clean_all(get_settings().run_config(species))
    print(f"Flow complete: {summary}")
