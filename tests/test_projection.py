"""Tests for column projection and the Geo-Filter."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd
import pytest

from occurrence_cleaner.cleaning.projection import (
    LAT,
    LON,
    NULLABLE_COLUMNS,
    OCCURRENCE_COLUMNS,
    drop_missing_coordinates,
    project,
)
from occurrence_cleaner.exceptions import MissingColumn, SchemaMismatch

if TYPE_CHECKING:
    from tests.conftest import FrameFactory, RecordFactory


class TestProject:
    """Test projecting raw records onto the cleaning columns."""

    def test_fixed_column_order(self, make_record: RecordFactory) -> None:
        raw = pd.DataFrame([make_record(issues=["ZERO_COORDINATE"], key=1)])
        # shuffle input columns; output order must not depend on them
        raw = raw[list(reversed(raw.columns))]

        out = project(raw)

        assert list(out.columns) == list(OCCURRENCE_COLUMNS)

    def test_dtypes(self, make_record: RecordFactory) -> None:
        out = project(pd.DataFrame([make_record(individualCount=3.0, year="2019")]))

        assert out[LON].dtype == "Float64"
        assert out["individualCount"].dtype == "Int64"
        assert out["individualCount"].iloc[0] == 3
        assert out["year"].iloc[0] == 2019
        assert out["gbifID"].dtype == "string"

    def test_missing_column_raises(self, make_record: RecordFactory) -> None:
        record = make_record()
        del record["basisOfRecord"]
        del record["family"]

        with pytest.raises(MissingColumn) as excinfo:
            project(pd.DataFrame([record]))

        assert excinfo.value.columns == ["family", "basisOfRecord"]
        assert "basisOfRecord" in str(excinfo.value)

    def test_missing_nullable_columns_filled(self, make_record: RecordFactory) -> None:
        """GBIF omits null fields, so a page without counts has no such column."""
        records = [make_record() for _ in range(5)]
        for record in records:
            del record["individualCount"]
            del record["coordinateUncertaintyInMeters"]

        out = project(pd.DataFrame(records))

        assert len(out) == 5
        assert out["individualCount"].isna().all()
        assert out["individualCount"].dtype == "Int64"
        assert out["coordinateUncertaintyInMeters"].dtype == "Float64"

    def test_nullable_fields_listed(self) -> None:
        assert set(NULLABLE_COLUMNS) < set(OCCURRENCE_COLUMNS)
        assert LON not in NULLABLE_COLUMNS
        assert "basisOfRecord" not in NULLABLE_COLUMNS

    def test_missing_column_is_schema_mismatch(self, make_record: RecordFactory) -> None:
        record = make_record()
        del record["species"]
        with pytest.raises(SchemaMismatch):
            project(pd.DataFrame([record]))

    def test_fill_missing(self, make_record: RecordFactory) -> None:
        record = make_record()
        del record["family"]

        out = project(pd.DataFrame([record]), fill_missing=True)

        assert out["family"].isna().all()
        assert out["family"].dtype == "string"

    def test_unparseable_numbers_become_null(self, make_record: RecordFactory) -> None:
        out = project(pd.DataFrame([make_record(coordinateUncertaintyInMeters="n/a")]))
        assert out["coordinateUncertaintyInMeters"].isna().all()

    def test_does_not_mutate_input(self, make_record: RecordFactory) -> None:
        raw = pd.DataFrame([make_record(extra="x")])
        project(raw)
        assert "extra" in raw.columns

    def test_empty_frame(self) -> None:
        out = project(pd.DataFrame(columns=list(OCCURRENCE_COLUMNS)))
        assert out.empty
        assert list(out.columns) == list(OCCURRENCE_COLUMNS)


class TestDropMissingCoordinates:
    """Test the Geo-Filter."""

    def test_drops_null_lon_or_lat(self, make_frame: FrameFactory) -> None:
        df = make_frame(
            {},
            {"decimalLongitude": None},
            {"decimalLatitude": None},
            {"decimalLongitude": None, "decimalLatitude": None},
        )

        out = drop_missing_coordinates(df)

        assert len(out) == 1
        assert out[LON].notna().all()
        assert out[LAT].notna().all()

    def test_keeps_zero_coordinates(self, make_frame: FrameFactory) -> None:
        """(0, 0) is a coordinate; the zeros flag test deals with it."""
        df = make_frame({"decimalLongitude": 0.0, "decimalLatitude": 0.0})
        out = drop_missing_coordinates(df)
        assert len(out) == 1

    def test_preserves_order(self, make_frame: FrameFactory) -> None:
        df = make_frame({"gbifID": "a"}, {"decimalLatitude": None}, {"gbifID": "b"})
        assert list(drop_missing_coordinates(df)["gbifID"]) == ["a", "b"]
