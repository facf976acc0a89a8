"""Country codes, capitals and centroids from the bundled ``countries.csv``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import pandas as pd

DATA_DIR = Path(__file__).resolve().parent / "data"
COUNTRIES_CSV = DATA_DIR / "countries.csv"


@lru_cache(maxsize=1)
def load_countries() -> pd.DataFrame:
    """Read the country table.

    ``keep_default_na=False`` keeps Namibia's ``NA`` code from turning into NaN.
    """
    return pd.read_csv(
        COUNTRIES_CSV,
        keep_default_na=False,
        na_values={
            "capital_lon": [""],
            "capital_lat": [""],
            "centroid_lon": [""],
            "centroid_lat": [""],
        },
        dtype={"iso2": str, "iso3": str, "name": str, "capital": str},
    )


ISO2_TO_ISO3: dict[str, str] = dict(
    zip(load_countries()["iso2"], load_countries()["iso3"], strict=True)
)


def to_iso3(code: object) -> str | None:
    """Map an ISO 3166 alpha-2 code to alpha-3; None when unmapped or malformed."""
    if not isinstance(code, str):
        return None
    return ISO2_TO_ISO3.get(code.strip().upper())


def capitals() -> pd.DataFrame:
    """Capital city per country as ``iso3, lon, lat``."""
    df = load_countries()
    out = df[["iso3", "capital_lon", "capital_lat"]].dropna()
    return out.rename(columns={"capital_lon": "lon", "capital_lat": "lat"}).reset_index(drop=True)


def centroids() -> pd.DataFrame:
    """Political centroid per country as ``iso3, lon, lat``."""
    df = load_countries()
    out = df[["iso3", "centroid_lon", "centroid_lat"]].dropna()
    return out.rename(columns={"centroid_lon": "lon", "centroid_lat": "lat"}).reset_index(drop=True)
