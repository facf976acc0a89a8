"""
Coordinate validity tests.

Each test adds a boolean column (True = pass) and runs independently of the
others, so a report can say how many records fail each test. ``summary`` is
the AND of the tests that were run.

Country-specific tests (capitals, centroids, institutions) compare a record
only against reference points in its declared country. A record whose
country code is null passes them: it is still checked by the
country-independent tests (equal, zeros, gbif).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import numpy as np
import pandas as pd

from occurrence_cleaner.cleaning.projection import COUNTRY, LAT, LON
from occurrence_cleaner.reference import GBIF_HQ, capitals, centroids, institutions
from occurrence_cleaner.schemas import ALL_TESTS, SUMMARY_COLUMN, FlagRadii, FlagTest

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0088


# =============================================================================
# Geometry
# =============================================================================


def haversine_km(
    lon1: np.ndarray | float,
    lat1: np.ndarray | float,
    lon2: np.ndarray | float,
    lat2: np.ndarray | float,
) -> np.ndarray:
    """Great-circle distance in km; broadcasts like numpy arithmetic."""
    lon1, lat1, lon2, lat2 = (
        np.radians(np.asarray(v, dtype=float)) for v in (lon1, lat1, lon2, lat2)
    )
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def _coords(df: pd.DataFrame) -> tuple[np.ndarray, np.ndarray]:
    lon = df[LON].astype("Float64").to_numpy(dtype=float, na_value=np.nan)
    lat = df[LAT].astype("Float64").to_numpy(dtype=float, na_value=np.nan)
    return lon, lat


def near_country_reference(
    df: pd.DataFrame, reference: pd.DataFrame, radius_km: float
) -> pd.Series:
    """
    True where a record lies within ``radius_km`` of any reference point of
    its own country (``reference`` has ``iso3, lon, lat``; several rows per
    country allowed).

    Records with a null country code, or a country absent from the reference,
    are never "near".
    """
    near = np.zeros(len(df), dtype=bool)
    if df.empty or reference.empty:
        return pd.Series(near, index=df.index)

    lon, lat = _coords(df)
    countries = df[COUNTRY]
    by_country = {iso3: grp for iso3, grp in reference.groupby("iso3")}
    for iso3 in countries.dropna().unique():
        ref = by_country.get(iso3)
        if ref is None:
            continue
        rows = np.flatnonzero((countries == iso3).fillna(False).to_numpy(dtype=bool))
        # (records, reference points) distance matrix for this country
        ref_lon = ref["lon"].to_numpy(dtype=float)[None, :]
        ref_lat = ref["lat"].to_numpy(dtype=float)[None, :]
        dist = haversine_km(lon[rows, None], lat[rows, None], ref_lon, ref_lat)
        near[rows] = (dist <= radius_km).any(axis=1)
    return pd.Series(near, index=df.index)


# =============================================================================
# Tests (True = pass)
# =============================================================================


def check_capitals(df: pd.DataFrame, radii: FlagRadii) -> pd.Series:
    """Fail records within ``capitals_km`` of their country's capital."""
    return ~near_country_reference(df, capitals(), radii.capitals_km)


def check_centroids(df: pd.DataFrame, radii: FlagRadii) -> pd.Series:
    """Fail records within ``centroids_km`` of their country's centroid."""
    return ~near_country_reference(df, centroids(), radii.centroids_km)


def check_institutions(df: pd.DataFrame, radii: FlagRadii) -> pd.Series:
    """Fail records within ``institutions_km`` of an institution in their country."""
    return ~near_country_reference(df, institutions(), radii.institutions_km)


def check_equal(df: pd.DataFrame, radii: FlagRadii) -> pd.Series:
    """Fail records whose longitude equals their latitude."""
    lon, lat = _coords(df)
    if radii.equal_absolute:
        lon, lat = np.abs(lon), np.abs(lat)
    return pd.Series(~(lon == lat), index=df.index)


def check_zeros(df: pd.DataFrame, radii: FlagRadii) -> pd.Series:
    """Fail records at (0, 0) or within ``zeros_deg`` of it."""
    lon, lat = _coords(df)
    at_zero = (lon == 0) & (lat == 0)
    near_zero = np.hypot(lon, lat) <= radii.zeros_deg
    return pd.Series(~(at_zero | near_zero), index=df.index)


def check_gbif(df: pd.DataFrame, radii: FlagRadii) -> pd.Series:
    """Fail records within ``gbif_km`` of the GBIF headquarters."""
    lon, lat = _coords(df)
    dist = haversine_km(lon, lat, GBIF_HQ.lon, GBIF_HQ.lat)
    return pd.Series(~(dist <= radii.gbif_km), index=df.index)


TESTS: dict[FlagTest, Callable[[pd.DataFrame, FlagRadii], pd.Series]] = {
    FlagTest.CAPITALS: check_capitals,
    FlagTest.CENTROIDS: check_centroids,
    FlagTest.EQUAL: check_equal,
    FlagTest.GBIF: check_gbif,
    FlagTest.INSTITUTIONS: check_institutions,
    FlagTest.ZEROS: check_zeros,
}


# =============================================================================
# Public API
# =============================================================================


def flag_occurrences(
    df: pd.DataFrame,
    *,
    tests: Iterable[FlagTest | str] = ALL_TESTS,
    radii: FlagRadii | None = None,
) -> pd.DataFrame:
    """
    Run each selected test and append its pass/fail column plus ``summary``.

    Args:
        df: Projected, coordinate-filtered, country-normalized records.
        tests: Tests to run, in any order; duplicates are ignored.
        radii: Proximity radii (defaults to ``FlagRadii()``).

    Returns:
        A copy of ``df`` with one bool column per test and ``summary``.
    """
    radii = radii or FlagRadii()
    selected = list(dict.fromkeys(FlagTest(t) for t in tests))
    out = df.copy()

    summary = pd.Series(True, index=out.index, dtype=bool)
    for test in selected:
        passed = TESTS[test](out, radii).astype(bool)
        out[test.value] = passed
        summary &= passed
        failed = int((~passed).sum())
        if failed:
            logger.info("Flag test %-12s failed %d record(s)", test.value, failed)
    out[SUMMARY_COLUMN] = summary
    return out


def flag_columns(df: pd.DataFrame) -> list[str]:
    """Test columns present on a flagged frame, in canonical order."""
    return [t.value for t in ALL_TESTS if t.value in df.columns]


def split_flagged(df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split a flagged frame into (summary passed, summary failed)."""
    passed = df[SUMMARY_COLUMN].astype(bool)
    return df.loc[passed].reset_index(drop=True), df.loc[~passed].reset_index(drop=True)


def flag_counts(df: pd.DataFrame) -> dict[str, int]:
    """Number of failing records per test, plus ``summary``."""
    cols = flag_columns(df)
    if SUMMARY_COLUMN in df.columns:
        cols.append(SUMMARY_COLUMN)
    return {c: int((~df[c].astype(bool)).sum()) for c in cols}
