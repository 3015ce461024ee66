"""
Symbol and datafeed configuration schemas.
"""

from typing import List

from pydantic import Field

from .base import UDFSchema


class ExchangeDescriptor(UDFSchema):
    value: str
    name: str
    desc: str


class SymbolTypeDescriptor(UDFSchema):
    name: str
    value: str


class DatafeedConfigResponse(UDFSchema):
    """Schema for the ``/config`` capability advertisement."""

    supports_search: bool = True
    supports_group_request: bool = False
    supports_marks: bool = False
    supports_timescale_marks: bool = False
    supports_time: bool = True
    has_intraday: bool = True
    has_daily: bool = True
    exchanges: List[ExchangeDescriptor]
    symbols_types: List[SymbolTypeDescriptor]
    supported_resolutions: List[str]


class SymbolInfoResponse(UDFSchema):
    """Schema for ``/symbols`` responses."""

    name: str
    exchange_traded: str = Field(alias="exchange-traded")
    exchange_listed: str = Field(alias="exchange-listed")
    timezone: str
    minmov: int
    minmov2: int
    pointvalue: int
    session: str
    has_intraday: bool
    has_no_volume: bool
    description: str
    type: str
    supported_resolutions: List[str]
    pricescale: int
    ticker: str


class SearchResult(UDFSchema):
    """One ``/search`` match."""

    symbol: str
    full_name: str
    description: str
    exchange: str
    type: str
