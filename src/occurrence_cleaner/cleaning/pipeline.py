"""
In-memory cleaning chain.

Projector -> Geo-Filter -> Country-Code Normalizer -> Flagger -> Quality Filter

``run_cleaning`` takes the raw fetch table and returns every output the
report needs. It does no I/O, so the Prefect flow and the tests share it.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

import pandas as pd

from occurrence_cleaner.cleaning.flags import flag_counts, flag_occurrences, split_flagged
from occurrence_cleaner.cleaning.normalize import normalize_country_codes
from occurrence_cleaner.cleaning.projection import drop_missing_coordinates, project
from occurrence_cleaner.cleaning.quality import apply_quality_filters
from occurrence_cleaner.exceptions import EmptyResultSet
from occurrence_cleaner.schemas import RunConfig

logger = logging.getLogger(__name__)


@dataclass
class CleaningResult:
    """Outputs of one cleaning run.

    ``clean``, ``flagged`` and ``rejected`` are disjoint: a record is either
    kept, failed a coordinate test, or failed a quality predicate.
    """

    clean: pd.DataFrame
    flagged: pd.DataFrame
    rejected: pd.DataFrame
    stage_counts: dict[str, int] = field(default_factory=dict)
    flag_counts: dict[str, int] = field(default_factory=dict)
    unmapped_country_codes: list[str] = field(default_factory=list)
    warnings: list[EmptyResultSet] = field(default_factory=list)

    def summary(self) -> dict[str, object]:
        """Plain-dict view for logging and store metadata."""
        return {
            "stage_counts": self.stage_counts,
            "flag_counts": self.flag_counts,
            "clean": len(self.clean),
            "flagged": len(self.flagged),
            "rejected": len(self.rejected),
            "unmapped_country_codes": self.unmapped_country_codes,
            "warnings": [str(w) for w in self.warnings],
        }


def _track(
    result_counts: dict[str, int],
    found: list[EmptyResultSet],
    stage: str,
    before: int,
    df: pd.DataFrame,
) -> None:
    """Record the stage's output size and warn if it emptied the table."""
    result_counts[stage] = len(df)
    if before > 0 and df.empty:
        warning = EmptyResultSet(stage, before=before, remaining=0)
        logger.warning("%s", warning)
        warnings.warn(warning, stacklevel=3)
        found.append(warning)


def run_cleaning(raw: pd.DataFrame, config: RunConfig) -> CleaningResult:
    """
    Run every in-memory stage on a raw fetch table.

    Raises:
        MissingColumn: the raw table lacks an expected field.
    """
    counts: dict[str, int] = {"fetched": len(raw)}
    found: list[EmptyResultSet] = []
    if raw.empty:
        warning = EmptyResultSet("fetch", before=0, remaining=0)
        logger.warning("No records fetched for %r", config.species)
        warnings.warn(warning, stacklevel=2)
        found.append(warning)

    projected = project(raw, fill_missing=config.fill_missing_columns)
    counts["projected"] = len(projected)

    located = drop_missing_coordinates(projected)
    _track(counts, found, "geo_filter", len(projected), located)

    normalized, unmapped = normalize_country_codes(located)

    flagged_all = flag_occurrences(normalized, tests=config.tests, radii=config.radii)
    passed, flagged = split_flagged(flagged_all)
    _track(counts, found, "flagger", len(flagged_all), passed)

    clean, rejected = apply_quality_filters(passed, config.thresholds)
    _track(counts, found, "quality_filter", len(passed), clean)

    logger.info(
        "Cleaned %r: %d fetched, %d clean, %d flagged, %d rejected",
        config.species,
        len(raw),
        len(clean),
        len(flagged),
        len(rejected),
    )
    return CleaningResult(
        clean=clean,
        flagged=flagged,
        rejected=rejected,
        stage_counts=counts,
        flag_counts=flag_counts(flagged_all),
        unmapped_country_codes=unmapped,
        warnings=found,
    )
