"""
Pydantic schemas for UDF request/response validation.
"""

from .base import UDFErrorResponse, UDFSchema
from .history import HistoryResponse
from .quotes import MarksResponse, QuoteEntry, QuotesResponse, QuoteValues, TimescaleMark
from .symbols import (
    DatafeedConfigResponse,
    ExchangeDescriptor,
    SearchResult,
    SymbolInfoResponse,
    SymbolTypeDescriptor,
)

__all__ = [
    "UDFSchema",
    "UDFErrorResponse",
    "HistoryResponse",
    "DatafeedConfigResponse",
    "ExchangeDescriptor",
    "SymbolTypeDescriptor",
    "SymbolInfoResponse",
    "SearchResult",
    "QuotesResponse",
    "QuoteEntry",
    "QuoteValues",
    "MarksResponse",
    "TimescaleMark",
]
