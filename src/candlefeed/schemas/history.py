"""
History schemas for UDF bar responses.
"""

from typing import List, Optional

from pydantic import Field

from ..services.history import HistoryOutcome, HistoryStatus
from .base import UDFSchema


class HistoryResponse(UDFSchema):
    """Schema for ``/history`` responses."""

    s: str
    t: Optional[List[int]] = None
    o: Optional[List[float]] = None
    h: Optional[List[float]] = None
    l: Optional[List[float]] = None  # noqa: E741
    c: Optional[List[float]] = None
    v: Optional[List[float]] = None
    next_time: Optional[int] = Field(default=None, alias="nextTime")
    errmsg: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: HistoryOutcome) -> "HistoryResponse":
        if outcome.status == HistoryStatus.OK:
            return cls(s="ok", **outcome.series.to_udf())
        if outcome.status == HistoryStatus.NO_DATA:
            return cls(s="no_data", next_time=outcome.next_time)
        return cls(s="error", errmsg=outcome.error or "error")
