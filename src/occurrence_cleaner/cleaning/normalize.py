"""Country-code normalization (ISO 3166 alpha-2 -> alpha-3)."""

from __future__ import annotations

import logging
import warnings

import pandas as pd

from occurrence_cleaner.cleaning.projection import COUNTRY
from occurrence_cleaner.exceptions import NormalizationMiss
from occurrence_cleaner.reference.countries import to_iso3

logger = logging.getLogger(__name__)


def normalize_country_codes(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """
    Replace ``countryCode`` with its alpha-3 equivalent.

    Unknown or malformed codes become null and are reported, never raised:
    a metadata gap must not abort the batch. Records that had no code to
    begin with are not counted as misses.

    Returns:
        (normalized frame, sorted list of distinct unmapped codes)
    """
    out = df.copy()
    original = out[COUNTRY]
    mapped = original.map(to_iso3, na_action="ignore")
    out[COUNTRY] = mapped.astype("string")

    miss_mask = original.notna() & mapped.isna()
    unmapped = sorted({str(c) for c in original[miss_mask]})
    if unmapped:
        records = int(miss_mask.sum())
        logger.warning(
            "%d record(s) with unmapped country code(s): %s", records, ", ".join(unmapped)
        )
        warnings.warn(NormalizationMiss(unmapped, records), stacklevel=2)
    return out, unmapped
