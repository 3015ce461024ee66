"""
Unit tests for synthetic marks.
"""

from datetime import datetime, timezone

from candlefeed.services.marks import build_marks, build_timescale_marks, utc_midnight

from helpers import DAY, T0

NOW = datetime(2024, 1, 8, 15, 42, tzinfo=timezone.utc)


def test_utc_midnight():
    assert utc_midnight(NOW) == T0


def test_marks_are_anchored_at_midnight():
    marks = build_marks(NOW)
    assert marks["time"] == [T0, T0 - 4 * DAY, T0 - 7 * DAY, T0 - 7 * DAY, T0 - 15 * DAY, T0 - 30 * DAY]
    assert marks["label"] == ["A", "B", "CORE", "D", "EURO", "F"]
    assert marks["color"] == ["red", "blue", "green", "red", "blue", "green"]
    assert all(len(column) == 6 for column in marks.values())


def test_timescale_marks():
    marks = build_timescale_marks(NOW)
    assert [mark["time"] for mark in marks] == [T0, T0 - 4 * DAY, T0 - 7 * DAY, T0 - 15 * DAY, T0 - 30 * DAY]
    assert marks[0]["tooltip"] == ""
    assert marks[1]["tooltip"] == ["Dividends: $0.56", "Date: Thu Jan 04 2024"]
    assert marks[3]["color"] == "#999999"
