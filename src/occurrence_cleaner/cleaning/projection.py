"""Column projection and the missing-coordinate filter."""

from __future__ import annotations

import logging

import pandas as pd

from occurrence_cleaner.exceptions import MissingColumn

logger = logging.getLogger(__name__)

LON = "decimalLongitude"
LAT = "decimalLatitude"
COUNTRY = "countryCode"

#: Fields kept for cleaning, in output order (GBIF Darwin Core names).
OCCURRENCE_COLUMNS: tuple[str, ...] = (
    "species",
    LON,
    LAT,
    COUNTRY,
    "individualCount",
    "gbifID",
    "family",
    "taxonRank",
    "coordinateUncertaintyInMeters",
    "year",
    "basisOfRecord",
    "institutionCode",
    "datasetName",
)

#: Nullable fields GBIF leaves out of its JSON when no record on a page has them.
NULLABLE_COLUMNS: tuple[str, ...] = (
    COUNTRY,
    "individualCount",
    "coordinateUncertaintyInMeters",
    "year",
    "institutionCode",
    "datasetName",
)

_FLOAT_COLUMNS = (LON, LAT, "coordinateUncertaintyInMeters")
_INT_COLUMNS = ("individualCount", "year")
_STRING_COLUMNS = tuple(c for c in OCCURRENCE_COLUMNS if c not in _FLOAT_COLUMNS + _INT_COLUMNS)


def project(raw: pd.DataFrame, *, fill_missing: bool = False) -> pd.DataFrame:
    """
    Select the cleaning columns in fixed order and coerce their dtypes.

    Args:
        raw: Raw records, one row per occurrence.
        fill_missing: Also fill absent required columns with nulls instead of
            failing. Absent ``NULLABLE_COLUMNS`` are always filled, since
            GBIF omits null fields and a small result set can lack one
            entirely.

    Raises:
        MissingColumn: A required field is absent and ``fill_missing`` is off.
    """
    missing = [c for c in OCCURRENCE_COLUMNS if c not in raw.columns]
    required = [c for c in missing if c not in NULLABLE_COLUMNS]
    if required and not fill_missing:
        raise MissingColumn(required)
    if missing:
        logger.info("Filling absent column(s) with nulls: %s", ", ".join(missing))

    out = raw.reindex(columns=list(OCCURRENCE_COLUMNS)).copy()
    for col in _FLOAT_COLUMNS:
        out[col] = pd.to_numeric(out[col], errors="coerce").astype("Float64")
    for col in _INT_COLUMNS:
        # round-trip through float so "3.0" and 3.0 both land as 3
        as_float = pd.to_numeric(out[col], errors="coerce").astype("Float64")
        out[col] = as_float.round().astype("Int64")
    for col in _STRING_COLUMNS:
        out[col] = out[col].astype("string")
    return out.reset_index(drop=True)


def drop_missing_coordinates(df: pd.DataFrame) -> pd.DataFrame:
    """Drop records without a longitude or latitude, keeping row order."""
    has_coords = df[LON].notna() & df[LAT].notna()
    dropped = int((~has_coords).sum())
    if dropped:
        logger.info("Dropped %d record(s) without coordinates", dropped)
    return df.loc[has_coords].reset_index(drop=True)
