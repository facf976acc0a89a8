"""Biodiversity institution locations from the bundled ``institutions.csv``."""

from __future__ import annotations

from functools import lru_cache

import pandas as pd

from occurrence_cleaner.reference.countries import DATA_DIR

INSTITUTIONS_CSV = DATA_DIR / "institutions.csv"


@lru_cache(maxsize=1)
def institutions() -> pd.DataFrame:
    """Institution headquarters as ``code, iso3, name, lon, lat``."""
    return pd.read_csv(INSTITUTIONS_CSV, keep_default_na=False, dtype={"code": str, "iso3": str})
