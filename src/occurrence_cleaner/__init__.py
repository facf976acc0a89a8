"""Occurrence Cleaner - GBIF species occurrences, quality-controlled and mapped.

Architecture::

    datasources/   External APIs (GBIF occurrence search, species match)
    store.py       Raw fetch cache with TTL and derived output tables
    reference/     Static lookup data (country codes, capitals, centroids, institutions)
    cleaning/      Pure DataFrame stages (projection, normalization, flags, quality)
    renderers/     Pure data -> figures / HTML (plots, Leaflet map, flag summary)
    flows/         Prefect orchestration (clean fetches and filters, report renders)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources -> store (raw) -> cleaning -> store (derived) -> renderers

Each cleaning stage takes a DataFrame and returns a new one; nothing reads back
from a later stage.
"""

__version__ = "0.1.0"
__author__ = "Michael Howden"

from occurrence_cleaner.config import Settings
from occurrence_cleaner.schemas import FlagRadii, QualityThresholds, RunConfig

__all__ = ["FlagRadii", "QualityThresholds", "RunConfig", "Settings", "__version__"]
