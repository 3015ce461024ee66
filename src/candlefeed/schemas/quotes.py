"""
Quote and mark schemas.
"""

from typing import List, Optional, Union

from pydantic import Field

from .base import UDFSchema


class QuoteValues(UDFSchema):
    ch: float
    chp: float
    short_name: str
    exchange: str
    original_name: str
    description: str
    lp: float
    ask: float
    bid: float
    open_price: float
    high_price: float
    low_price: float
    prev_close_price: float
    volume: float


class QuoteEntry(UDFSchema):
    s: str
    n: str
    v: Union[QuoteValues, dict] = Field(default_factory=dict)


class QuotesResponse(UDFSchema):
    """Schema for ``/quotes`` responses."""

    s: str = "ok"
    d: List[QuoteEntry]
    source: Optional[str] = None


class MarksResponse(UDFSchema):
    """Schema for ``/marks`` responses (column form)."""

    id: List[int]
    time: List[int]
    color: List[str]
    text: List[str]
    label: List[str]
    label_font_color: List[str] = Field(alias="labelFontColor")
    min_size: List[int] = Field(alias="minSize")


class TimescaleMark(UDFSchema):
    id: str
    time: int
    color: str
    label: str
    tooltip: Union[str, List[str]]
