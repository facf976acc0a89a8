"""Small aggregate views of cleaned tables, used by the report."""

from __future__ import annotations

from typing import Any

import pandas as pd

from occurrence_cleaner.cleaning.projection import LAT, LON


def records_per_year(df: pd.DataFrame) -> dict[int, int]:
    """Record count per year, ascending; records without a year are skipped."""
    years = df["year"].dropna().astype(int)
    counts = years.value_counts().sort_index()
    return {int(year): int(n) for year, n in counts.items()}


def bounding_box(
    df: pd.DataFrame, padding_deg: float = 0.0
) -> tuple[float, float, float, float] | None:
    """(west, south, east, north) around the records, clamped to valid degrees."""
    lon = df[LON].dropna()
    lat = df[LAT].dropna()
    if lon.empty or lat.empty:
        return None
    return (
        max(float(lon.min()) - padding_deg, -180.0),
        max(float(lat.min()) - padding_deg, -90.0),
        min(float(lon.max()) + padding_deg, 180.0),
        min(float(lat.max()) + padding_deg, 90.0),
    )


def table_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Rows as plain dicts with nulls as None (for templates and JSON)."""
    return [
        {k: (None if pd.isna(v) else v) for k, v in row.items()}
        for row in df.astype(object).to_dict(orient="records")
    ]
