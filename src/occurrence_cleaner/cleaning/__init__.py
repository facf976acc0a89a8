"""Pure DataFrame cleaning stages.

Every function takes a DataFrame and returns a new one; nothing here does
I/O or touches Prefect.

Public API:
  - projection: OCCURRENCE_COLUMNS, project, drop_missing_coordinates
  - normalize: normalize_country_codes
  - flags: flag_occurrences, split_flagged, flag_counts, haversine_km
  - quality: apply_quality_filters and the single-predicate filters
  - summary: records_per_year, bounding_box
  - pipeline: run_cleaning, CleaningResult
"""

from occurrence_cleaner.cleaning.flags import (
    flag_columns,
    flag_counts,
    flag_occurrences,
    haversine_km,
    split_flagged,
)
from occurrence_cleaner.cleaning.normalize import normalize_country_codes
from occurrence_cleaner.cleaning.pipeline import CleaningResult, run_cleaning
from occurrence_cleaner.cleaning.projection import (
    OCCURRENCE_COLUMNS,
    drop_missing_coordinates,
    project,
)
from occurrence_cleaner.cleaning.quality import (
    apply_quality_filters,
    filter_basis_of_record,
    filter_individual_count,
    filter_uncertainty,
)
from occurrence_cleaner.cleaning.summary import bounding_box, records_per_year

__all__ = [
    "OCCURRENCE_COLUMNS",
    "CleaningResult",
    "apply_quality_filters",
    "bounding_box",
    "drop_missing_coordinates",
    "filter_basis_of_record",
    "filter_individual_count",
    "filter_uncertainty",
    "flag_columns",
    "flag_counts",
    "flag_occurrences",
    "haversine_km",
    "normalize_country_codes",
    "project",
    "records_per_year",
    "run_cleaning",
    "split_flagged",
]
