"""Shared fixtures: GBIF-shaped occurrence records and tables."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

import pandas as pd
import pytest

from occurrence_cleaner.cleaning.projection import project

# Central Amazonia: far from every Brazilian reference point, (0, 0) and GBIF HQ.
BASE_RECORD: dict[str, Any] = {
    "species": "Panthera onca",
    "decimalLongitude": -60.5,
    "decimalLatitude": -5.0,
    "countryCode": "BR",
    "individualCount": 1,
    "gbifID": "1000",
    "family": "Felidae",
    "taxonRank": "SPECIES",
    "coordinateUncertaintyInMeters": 50.0,
    "year": 2020,
    "basisOfRecord": "HUMAN_OBSERVATION",
    "institutionCode": "iNaturalist",
    "datasetName": "iNaturalist research-grade observations",
}

RecordFactory = Callable[..., dict[str, Any]]
FrameFactory = Callable[..., pd.DataFrame]


@pytest.fixture
def make_record() -> RecordFactory:
    """Build a raw record that passes every test unless overridden.

    Each call gets a distinct ``gbifID``.
    """
    ids = itertools.count(1000)

    def _make(**overrides: Any) -> dict[str, Any]:
        record = {**BASE_RECORD, "gbifID": str(next(ids))}
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def make_frame(make_record: RecordFactory) -> FrameFactory:
    """Build a projected table from per-record override dicts."""

    def _make(*overrides: dict[str, Any]) -> pd.DataFrame:
        return project(pd.DataFrame([make_record(**o) for o in overrides]))

    return _make
