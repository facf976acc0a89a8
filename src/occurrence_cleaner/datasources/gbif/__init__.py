"""GBIF occurrence data source.

Public API:
  - client: Low-level HTTP (error translation, paging limits)
  - occurrences: fetch_occurrences, fetch_occurrence_records, match_taxon
"""

from occurrence_cleaner.datasources.gbif.client import MAX_PAGE_SIZE, MAX_RESULTS
from occurrence_cleaner.datasources.gbif.occurrences import (
    fetch_occurrence_records,
    fetch_occurrences,
    match_taxon,
    records_to_frame,
)

__all__ = [
    "MAX_PAGE_SIZE",
    "MAX_RESULTS",
    "fetch_occurrence_records",
    "fetch_occurrences",
    "match_taxon",
    "records_to_frame",
]
