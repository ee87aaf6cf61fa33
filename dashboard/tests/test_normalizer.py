"""
Tests for the cumulative reading normalizer.

Verifies value-column discovery, numeric coercion of malformed values,
sorting, last-wins duplicate handling, and that the normalizer is a pure
function.

CHANGELOG:
- 2026-10-19: Cover coercion logging (STORY-003)
- 2026-10-13: Cover explicit value_key (STORY-003)
- 2026-10-12: Initial creation -- tests written first (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import copy
import logging

import pytest

from dashboard.src.models import CumulativeReading
from dashboard.src.normalizer import normalize, parse_wh


class TestValueDiscovery:
    """The value column is the one key that is not time_stamp."""

    def test_discovers_p2_column(self) -> None:
        result = normalize([{"time_stamp": "20250101", "p2": "5000"}])
        assert result == [CumulativeReading(timestamp="20250101", cumulative_wh=5000.0)]

    def test_discovers_column_regardless_of_key_order(self) -> None:
        result = normalize([{"p87": "1234.5", "time_stamp": "20250101"}])
        assert result[0].cumulative_wh == pytest.approx(1234.5)

    def test_explicit_value_key_pins_column(self) -> None:
        rows = [{"time_stamp": "20250101", "p1": "10", "p2": "20"}]
        assert normalize(rows)[0].cumulative_wh == 10.0
        assert normalize(rows, value_key="p2")[0].cumulative_wh == 20.0

    def test_row_without_value_column_is_zero(self) -> None:
        result = normalize([{"time_stamp": "20250101"}])
        assert result[0].cumulative_wh == 0.0

    def test_cumulative_kwh_conversion(self) -> None:
        result = normalize([{"time_stamp": "20250101", "p2": "5000"}])
        assert result[0].cumulative_kwh == pytest.approx(5.0)


class TestMalformedValues:
    """Malformed or missing values coerce to 0 without raising."""

    @pytest.mark.parametrize("raw", ["N/A", "", "  ", None, "nan", "inf", "-250", "12abc"])
    def test_coerced_to_zero(self, raw: object) -> None:
        result = normalize([{"time_stamp": "20250101", "p2": raw}])
        assert result[0].cumulative_wh == 0.0

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("5000", 5000.0), (" 42.5 ", 42.5), (1500, 1500.0), ("0", 0.0), (True, 0.0)],
    )
    def test_parse_wh(self, raw: object, expected: float) -> None:
        assert parse_wh(raw) == expected


class TestOrdering:
    """Output is sorted ascending with last-wins duplicates."""

    def test_sorts_by_timestamp(self) -> None:
        rows = [
            {"time_stamp": "20250103", "p2": "3000"},
            {"time_stamp": "20250101", "p2": "1000"},
            {"time_stamp": "20250102", "p2": "2000"},
        ]
        result = normalize(rows)
        assert [r.timestamp for r in result] == ["20250101", "20250102", "20250103"]

    def test_duplicate_timestamp_keeps_last_occurrence(self) -> None:
        rows = [
            {"time_stamp": "20250101", "p2": "1000"},
            {"time_stamp": "20250102", "p2": "2000"},
            {"time_stamp": "20250101", "p2": "1500"},
        ]
        result = normalize(rows)
        assert len(result) == 2
        assert result[0].timestamp == "20250101"
        assert result[0].cumulative_wh == 1500.0

    def test_already_sorted_input_is_unchanged(self) -> None:
        """Idempotent sort: sorted, duplicate-free input keeps its order and values."""
        rows = [
            {"time_stamp": "20250101", "p2": "1000"},
            {"time_stamp": "20250102", "p2": "3000"},
            {"time_stamp": "20250103", "p2": "3500"},
        ]
        first = normalize(rows)
        again = normalize(
            [{"time_stamp": r.timestamp, "p2": str(r.cumulative_wh)} for r in first]
        )
        assert [(r.timestamp, r.cumulative_wh) for r in first] == [
            ("20250101", 1000.0),
            ("20250102", 3000.0),
            ("20250103", 3500.0),
        ]
        assert again == first

    def test_dashed_timestamps_are_canonicalised(self) -> None:
        result = normalize([{"time_stamp": "2025-01-01", "p2": "1"}])
        assert result[0].timestamp == "20250101"


class TestEdgeCases:
    """Empty input, unkeyed rows and purity."""

    def test_empty_input_returns_empty_list(self) -> None:
        assert normalize([]) == []

    def test_row_without_time_stamp_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        rows = [{"p2": "1000"}, {"time_stamp": "20250102", "p2": "2000"}]
        with caplog.at_level(logging.WARNING, logger="dashboard.src.normalizer"):
            result = normalize(rows)
        assert [r.timestamp for r in result] == ["20250102"]
        assert "missing 'time_stamp'" in caplog.text

    def test_coercion_of_unusable_value_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        rows = [
            {"time_stamp": "20250101", "p2": "N/A"},
            {"time_stamp": "20250102", "p2": "-5"},
            {"time_stamp": "20250103", "p2": ""},
            {"time_stamp": "20250104", "p2": "0"},
        ]
        with caplog.at_level(logging.DEBUG, logger="dashboard.src.normalizer"):
            normalize(rows)
        coerced = [r.getMessage() for r in caplog.records if "coerced to 0" in r.getMessage()]
        assert len(coerced) == 2
        assert "'N/A'" in coerced[0]
        assert "'-5'" in coerced[1]

    def test_input_rows_are_not_mutated(self) -> None:
        rows = [
            {"time_stamp": "20250102", "p2": "2000"},
            {"time_stamp": "20250101", "p2": "N/A"},
        ]
        snapshot = copy.deepcopy(rows)
        normalize(rows)
        assert rows == snapshot

    def test_accepts_generator_input(self) -> None:
        rows = ({"time_stamp": f"2025010{i}", "p2": str(i * 1000)} for i in range(1, 4))
        assert len(normalize(rows)) == 3
