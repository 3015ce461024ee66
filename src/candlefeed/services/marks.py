"""Synthetic chart marks and timescale marks."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .history.utils import DAY

MARK_OFFSETS_DAYS = (0, 4, 7, 7, 15, 30)


def utc_midnight(now: Optional[datetime] = None) -> int:
    """Epoch seconds of today's UTC midnight."""
    now = now or datetime.now(timezone.utc)
    return int(datetime(now.year, now.month, now.day, tzinfo=timezone.utc).timestamp())


def _date_string(seconds: int) -> str:
    return datetime.fromtimestamp(seconds, timezone.utc).strftime("%a %b %d %Y")


def build_marks(now: Optional[datetime] = None) -> Dict[str, List[Any]]:
    """Six marks anchored at today's UTC midnight, in UDF column form."""
    today = utc_midnight(now)
    return {
        "id": [0, 1, 2, 3, 4, 5],
        "time": [today - offset * DAY for offset in MARK_OFFSETS_DAYS],
        "color": ["red", "blue", "green", "red", "blue", "green"],
        "text": [
            "Today",
            "4 days back",
            "7 days back + Lorem ipsum dolor sit amet, consectetur adipiscing elit, "
            "sed do eiusmod tempor incididunt ut labore et dolore magna aliqua.",
            "7 days back once again",
            "15 days back",
            "30 days back",
        ],
        "label": ["A", "B", "CORE", "D", "EURO", "F"],
        "labelFontColor": ["white", "white", "red", "#FFFFFF", "white", "#000"],
        "minSize": [14, 28, 7, 40, 7, 14],
    }


def build_timescale_marks(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    today = utc_midnight(now)
    return [
        {"id": "tsm1", "time": today, "color": "red", "label": "A", "tooltip": ""},
        {
            "id": "tsm2",
            "time": today - 4 * DAY,
            "color": "blue",
            "label": "D",
            "tooltip": ["Dividends: $0.56", f"Date: {_date_string(today - 4 * DAY)}"],
        },
        {
            "id": "tsm3",
            "time": today - 7 * DAY,
            "color": "green",
            "label": "D",
            "tooltip": ["Dividends: $3.46", f"Date: {_date_string(today - 7 * DAY)}"],
        },
        {
            "id": "tsm4",
            "time": today - 15 * DAY,
            "color": "#999999",
            "label": "E",
            "tooltip": ["Earnings: $3.44", "Estimate: $3.60"],
        },
        {
            "id": "tsm7",
            "time": today - 30 * DAY,
            "color": "red",
            "label": "E",
            "tooltip": ["Earnings: $5.40", "Estimate: $5.00"],
        },
    ]
