"""
Tests for the GBIF data source.

All HTTP is mocked at ``client.session.get``.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests

from occurrence_cleaner.cleaning.projection import OCCURRENCE_COLUMNS
from occurrence_cleaner.datasources.gbif import client
from occurrence_cleaner.datasources.gbif.occurrences import (
    fetch_occurrence_records,
    fetch_occurrences,
    match_taxon,
    records_to_frame,
)
from occurrence_cleaner.exceptions import FetchCancelled, QuotaExceeded, SourceUnavailable

SESSION_GET = "occurrence_cleaner.datasources.gbif.client.session.get"


def _response(payload: Any, status: int = 200) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
    else:
        resp.raise_for_status = Mock()
    return resp


def _page(n: int, start: int = 0, end: bool = False) -> dict[str, Any]:
    return {
        "offset": start,
        "limit": n,
        "endOfRecords": end,
        "results": [{"gbifID": str(start + i), "species": "Panthera onca"} for i in range(n)],
    }


class TestClientErrors:
    """Transport and HTTP failures become pipeline errors."""

    @patch(SESSION_GET)
    def test_connection_error(self, mock_get: Mock) -> None:
        mock_get.side_effect = requests.ConnectionError("connection reset")
        with pytest.raises(SourceUnavailable, match="occurrence/search"):
            client.search_occurrences({})

    @patch(SESSION_GET)
    def test_timeout(self, mock_get: Mock) -> None:
        mock_get.side_effect = requests.Timeout("read timed out")
        with pytest.raises(SourceUnavailable):
            client.search_occurrences({})

    @patch(SESSION_GET)
    def test_server_error(self, mock_get: Mock) -> None:
        mock_get.return_value = _response({}, status=503)
        with pytest.raises(SourceUnavailable, match="503"):
            client.search_occurrences({})

    @patch(SESSION_GET)
    def test_rate_limited(self, mock_get: Mock) -> None:
        mock_get.return_value = _response({}, status=429)
        with pytest.raises(QuotaExceeded):
            client.search_occurrences({})

    @patch(SESSION_GET)
    def test_non_json_body(self, mock_get: Mock) -> None:
        resp = _response(None)
        resp.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = resp
        with pytest.raises(SourceUnavailable, match="non-JSON"):
            client.search_occurrences({})

    @patch(SESSION_GET)
    def test_url(self, mock_get: Mock) -> None:
        mock_get.return_value = _response({"results": []})
        client.match_species({"name": "Panthera onca"})
        assert mock_get.call_args.args[0] == "https://api.gbif.org/v1/species/match"
        assert mock_get.call_args.kwargs["params"] == {"name": "Panthera onca"}


class TestMatchTaxon:
    """Test backbone name matching."""

    @patch(SESSION_GET)
    def test_exact_match(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(
            {
                "usageKey": 5219426,
                "scientificName": "Panthera onca (Linnaeus, 1758)",
                "canonicalName": "Panthera onca",
                "rank": "SPECIES",
                "family": "Felidae",
                "matchType": "EXACT",
                "confidence": 99,
            }
        )

        taxon = match_taxon("Panthera onca")

        assert taxon is not None
        assert taxon.key == 5219426
        assert taxon.canonical_name == "Panthera onca"
        assert taxon.family == "Felidae"
        assert mock_get.call_args.kwargs["params"]["strict"] == "false"

    @patch(SESSION_GET)
    def test_no_match(self, mock_get: Mock) -> None:
        mock_get.return_value = _response({"matchType": "NONE", "confidence": 100})
        assert match_taxon("Nonexistus fakeus") is None

    @patch(SESSION_GET)
    def test_strict_flag(self, mock_get: Mock) -> None:
        mock_get.return_value = _response({"matchType": "NONE"})
        match_taxon("Panthera onca", strict=True)
        assert mock_get.call_args.kwargs["params"]["strict"] == "true"


class TestFetchOccurrenceRecords:
    """Test paging through the occurrence search."""

    @patch(SESSION_GET)
    def test_single_page(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(_page(3, end=True))

        records = fetch_occurrence_records("Panthera onca", 10)

        assert len(records) == 3
        params = mock_get.call_args.kwargs["params"]
        assert params["scientificName"] == "Panthera onca"
        assert params["hasCoordinate"] == "true"
        assert params["limit"] == 10
        assert params["offset"] == 0

    @patch(SESSION_GET)
    def test_pages_until_limit(self, mock_get: Mock) -> None:
        mock_get.side_effect = [
            _response(_page(300, start=0)),
            _response(_page(200, start=300)),
        ]

        records = fetch_occurrence_records("Panthera onca", 500)

        assert len(records) == 500
        assert mock_get.call_count == 2
        second = mock_get.call_args_list[1].kwargs["params"]
        assert second["offset"] == 300
        assert second["limit"] == 200

    @patch(SESSION_GET)
    def test_stops_at_end_of_records(self, mock_get: Mock) -> None:
        mock_get.side_effect = [
            _response(_page(300, start=0)),
            _response(_page(12, start=300, end=True)),
        ]

        records = fetch_occurrence_records("Panthera onca", 5000)

        assert len(records) == 312
        assert mock_get.call_count == 2

    @patch(SESSION_GET)
    def test_taxon_key_takes_precedence(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(_page(1, end=True))

        fetch_occurrence_records("Panthera onca", 10, taxon_key=5219426)

        params = mock_get.call_args.kwargs["params"]
        assert params["taxonKey"] == 5219426
        assert "scientificName" not in params

    @patch(SESSION_GET)
    def test_coordinates_optional(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(_page(1, end=True))

        fetch_occurrence_records("Panthera onca", 10, require_coords=False)

        assert "hasCoordinate" not in mock_get.call_args.kwargs["params"]

    @patch(SESSION_GET)
    def test_limit_over_ceiling(self, mock_get: Mock) -> None:
        with pytest.raises(QuotaExceeded):
            fetch_occurrence_records("Panthera onca", client.MAX_RESULTS + 1)
        mock_get.assert_not_called()

    @patch(SESSION_GET)
    def test_cancel_between_pages(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(_page(300))
        calls = iter([False, True])

        with pytest.raises(FetchCancelled, match="300"):
            fetch_occurrence_records("Panthera onca", 1000, should_cancel=lambda: next(calls))
        assert mock_get.call_count == 1

    @patch(SESSION_GET)
    def test_source_failure_propagates(self, mock_get: Mock) -> None:
        mock_get.side_effect = requests.ConnectionError("down")
        with pytest.raises(SourceUnavailable):
            fetch_occurrence_records("Panthera onca", 10)


class TestFetchOccurrences:
    """Test the DataFrame-returning fetch."""

    @patch(SESSION_GET)
    def test_returns_frame(self, mock_get: Mock) -> None:
        mock_get.return_value = _response(_page(2, end=True))

        df = fetch_occurrences("Panthera onca", 10)

        assert len(df) == 2
        assert list(df["gbifID"]) == ["0", "1"]

    @patch(SESSION_GET)
    def test_zero_matches(self, mock_get: Mock) -> None:
        mock_get.return_value = _response({"results": [], "endOfRecords": True})

        df = fetch_occurrences("Nonexistus fakeus", 10)

        assert df.empty
        assert list(df.columns) == list(OCCURRENCE_COLUMNS)


class TestRecordsToFrame:
    def test_empty(self) -> None:
        assert list(records_to_frame([]).columns) == list(OCCURRENCE_COLUMNS)

    def test_keeps_extra_fields(self) -> None:
        df = records_to_frame([{"gbifID": "1", "issues": ["ZERO_COORDINATE"]}])
        assert "issues" in df.columns
