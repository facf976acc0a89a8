"""
Prefect flow for building the report from cleaned tables.

Reads what ``flows/clean.py`` wrote, renders figures and the Leaflet map,
and writes a single self-contained ``index.html``.

Run locally:
    python -m occurrence_cleaner.flows.report "Panthera onca"
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd
from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from occurrence_cleaner.cleaning.summary import records_per_year, table_records
from occurrence_cleaner.config import get_settings
from occurrence_cleaner.renderers import render_template
from occurrence_cleaner.renderers.flag_summary import build_flag_summary_html
from occurrence_cleaner.renderers.occurrence_map import build_occurrence_map_html
from occurrence_cleaner.renderers.plots import (
    build_bounding_box_map,
    build_occurrence_scatter,
    build_year_histogram,
    figure_to_data_uri,
)
from occurrence_cleaner.schemas import RunConfig
from occurrence_cleaner.store import DataStore

store = DataStore(get_settings().data_dir)


def site_dir(config: RunConfig) -> Path:
    return store.derived / config.slug / "site"


# =============================================================================
# Data loading tasks
# =============================================================================


@task(name="load-table", cache_policy=NO_CACHE)
def load_table(config: RunConfig, name: str) -> pd.DataFrame | None:
    """Load one of the clean/flagged/rejected tables from store."""
    return store.read_table(Path(f"derived/{config.slug}/{name}.csv"))


@task(name="load-summary")
def load_summary(config: RunConfig) -> dict[str, Any] | None:
    """Load the cleaning run summary from store."""
    data: dict[str, Any] | None = store.read(Path(f"derived/{config.slug}/summary.json"))
    return data


# =============================================================================
# Build tasks
# =============================================================================


@task(name="build-figures", cache_policy=NO_CACHE)
def build_figures(clean: pd.DataFrame, flagged: pd.DataFrame) -> list[dict[str, str]]:
    """Render static figures as inline PNG data URIs."""
    figures = [
        (build_occurrence_scatter(clean, flagged), "All records by flag status"),
        (build_bounding_box_map(clean), "Clean records, cropped to their extent"),
        (build_year_histogram(records_per_year(clean)), "Clean records per year"),
    ]
    return [{"src": figure_to_data_uri(fig), "caption": caption} for fig, caption in figures]


@task(name="build-html", cache_policy=NO_CACHE)
def build_html(
    config: RunConfig,
    clean: pd.DataFrame,
    flagged: pd.DataFrame,
    rejected: pd.DataFrame,
    summary: dict[str, Any],
    figures: list[dict[str, str]],
) -> str:
    """Assemble the report page."""
    occurrence_map, map_script = build_occurrence_map_html(
        table_records(clean),
        table_records(flagged),
        table_records(rejected),
        title=f"{config.species} occurrences",
    )
    return render_template(
        "report.html.j2",
        species=config.species,
        updated=datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC"),
        clean_count=len(clean),
        flag_summary=build_flag_summary_html(summary, records_per_year(clean)),
        figures=figures,
        occurrence_map=occurrence_map,
        map_script=map_script,
    )


@task(name="write-site")
def write_site(config: RunConfig, html: str) -> Path:
    """Write HTML to the species' site directory."""
    out_dir = site_dir(config)
    out_dir.mkdir(parents=True, exist_ok=True)
    output_path = out_dir / "index.html"
    with output_path.open("w") as f:
        f.write(html)
    return output_path


@flow(name="build-report", log_prints=True)
def build_report(config: RunConfig) -> dict[str, Any]:
    """
    Build the report for one taxon from cleaned tables.

    Returns ``{"error": ...}`` when the clean flow hasn't been run yet.
    """
    print(f"Loading cleaned tables for {config.species!r}...")
    clean = load_table(config, "clean")
    if clean is None:
        print("No cleaned data found. Run the clean flow first.")
        return {"error": "no data"}

    flagged = load_table(config, "flagged")
    if flagged is None:
        print("Warning: No flagged table found. Building without flagged records.")
        flagged = clean.iloc[0:0]

    rejected = load_table(config, "rejected")
    if rejected is None:
        rejected = clean.iloc[0:0]

    summary = load_summary(config) or {}

    print("Rendering figures...")
    figures = build_figures(clean, flagged)

    print("Building HTML...")
    html = build_html(config, clean, flagged, rejected, summary, figures)

    output_path = write_site(config, html)
    print(f"Report built: {output_path}")
    return {
        "clean": len(clean),
        "flagged": len(flagged),
        "rejected": len(rejected),
        "output": str(output_path),
    }


if __name__ == "__main__":
    species = " ".join(sys.argv[1:]) or None
    result = build_report(get_settings().run_config(species))
    print(f"Flow complete: {result}")
