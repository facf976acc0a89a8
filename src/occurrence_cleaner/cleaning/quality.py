"""
Metadata quality filters.

Three independent predicates, composed conjunctively. Each returns a boolean
mask (True = keep) so they can be reported separately; the ``filter_*``
wrappers apply a single predicate. All are monotonic: filtering an already
filtered table returns it unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import pandas as pd

from occurrence_cleaner.schemas import QualityThresholds

logger = logging.getLogger(__name__)

UNCERTAINTY = "coordinateUncertaintyInMeters"
BASIS = "basisOfRecord"
COUNT = "individualCount"
REASON_COLUMN = "quality_reason"


# =============================================================================
# Predicates (True = keep)
# =============================================================================


def uncertainty_ok(df: pd.DataFrame, max_km: float) -> pd.Series:
    """Uncertainty is unknown or at most ``max_km``."""
    uncertainty = df[UNCERTAINTY].astype("Float64")
    return (uncertainty.isna() | (uncertainty <= max_km * 1000.0)).fillna(True).astype(bool)


def basis_ok(df: pd.DataFrame, accepted: Iterable[str]) -> pd.Series:
    """Basis of record is one of ``accepted``."""
    accepted_upper = {str(a).upper() for a in accepted}
    basis = df[BASIS].astype("string").str.upper()
    return basis.isin(accepted_upper).fillna(False).astype(bool)


def count_ok(df: pd.DataFrame, count_min: int = 0, count_max: int | None = None) -> pd.Series:
    """Individual count is unknown, above ``count_min`` and (if set) below ``count_max``."""
    count = df[COUNT].astype("Int64")
    in_range = count > count_min
    if count_max is not None:
        in_range &= count < count_max
    return (count.isna() | in_range).fillna(True).astype(bool)


# =============================================================================
# Single-predicate filters
# =============================================================================


def filter_uncertainty(df: pd.DataFrame, max_km: float) -> pd.DataFrame:
    return df.loc[uncertainty_ok(df, max_km)].reset_index(drop=True)


def filter_basis_of_record(df: pd.DataFrame, accepted: Iterable[str]) -> pd.DataFrame:
    return df.loc[basis_ok(df, accepted)].reset_index(drop=True)


def filter_individual_count(
    df: pd.DataFrame, count_min: int = 0, count_max: int | None = None
) -> pd.DataFrame:
    return df.loc[count_ok(df, count_min, count_max)].reset_index(drop=True)


# =============================================================================
# Combined
# =============================================================================


def quality_masks(df: pd.DataFrame, thresholds: QualityThresholds) -> dict[str, pd.Series]:
    """Keep-mask per predicate, keyed by the name used in ``quality_reason``."""
    checks: dict[str, Callable[[], pd.Series]] = {
        "uncertainty": lambda: uncertainty_ok(df, thresholds.uncertainty_threshold_km),
        "basis_of_record": lambda: basis_ok(df, thresholds.accepted_basis),
        "individual_count": lambda: count_ok(df, thresholds.count_min, thresholds.count_max),
    }
    return {name: check() for name, check in checks.items()}


def apply_quality_filters(
    df: pd.DataFrame, thresholds: QualityThresholds | None = None
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Keep records that pass every predicate.

    Returns:
        (kept, rejected). ``rejected`` carries a ``quality_reason`` column
        listing each failed predicate, comma separated.
    """
    thresholds = thresholds or QualityThresholds()
    masks = quality_masks(df, thresholds)

    keep = pd.Series(True, index=df.index, dtype=bool)
    for name, mask in masks.items():
        keep &= mask
        dropped = int((~mask).sum())
        if dropped:
            logger.info("Quality filter %-16s rejected %d record(s)", name, dropped)

    rejected = df.loc[~keep].copy()
    rejected[REASON_COLUMN] = [
        ",".join(name for name, mask in masks.items() if not mask.loc[idx])
        for idx in rejected.index
    ]
    rejected[REASON_COLUMN] = rejected[REASON_COLUMN].astype("string")
    return df.loc[keep].reset_index(drop=True), rejected.reset_index(drop=True)
