"""Symbol catalogue: metadata lookup and fuzzy search."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..core.config import config

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "1;0000-2400|0000-2400:1"
DEFAULT_SEARCH_LIMIT = 50
DESCRIPTION_MATCH_WEIGHT = 8000


@dataclass
class SymbolRecord:
    name: str
    ticker: str
    description: str
    exchange: str
    type: str
    session: str = DEFAULT_SESSION
    timezone: str = "Etc/UTC"
    has_daily: bool = True
    has_intraday: bool = True
    supported_resolutions: List[str] = field(default_factory=lambda: list(config.supported_resolutions_list))

    def to_search_result(self) -> Dict[str, str]:
        return {
            "symbol": self.name,
            "full_name": self.name,
            "description": self.description,
            "exchange": self.exchange,
            "type": self.type,
        }

    def to_symbol_info(self) -> Dict[str, Any]:
        """Render the UDF SymbolInfo object."""
        return {
            "name": self.name,
            "exchange-traded": self.exchange,
            "exchange-listed": self.exchange,
            "timezone": self.timezone,
            "minmov": 1,
            "minmov2": 0,
            "pointvalue": 1,
            "session": self.session,
            "has_intraday": self.has_intraday,
            "has_no_volume": self.type != "stock",
            "description": self.description or self.name,
            "type": self.type,
            "supported_resolutions": list(self.supported_resolutions),
            "pricescale": 100000,
            "ticker": self.name.upper(),
        }


DEFAULT_SYMBOLS = [
    SymbolRecord(name="EUR_USD", ticker="EUR_USD", description="Euro/USD", exchange="Oanda", type="forex"),
    SymbolRecord(name="GBP_USD", ticker="GBP_USD", description="British Pound/USD", exchange="Oanda", type="forex"),
]


class SymbolsDatabase:
    """In-memory list of instruments served by the datafeed."""

    def __init__(self, symbols: Optional[Iterable[SymbolRecord]] = None):
        self._symbols: List[SymbolRecord] = list(DEFAULT_SYMBOLS if symbols is None else symbols)

    @property
    def symbols(self) -> List[SymbolRecord]:
        return list(self._symbols)

    def add_symbols(self, symbols: Iterable[SymbolRecord]) -> None:
        added = list(symbols)
        self._symbols.extend(added)
        logger.info(f"Added {len(added)} symbols to the catalogue")

    def lookup(self, symbol_name: str) -> Optional[SymbolRecord]:
        """
        Find a symbol by ``NAME`` or ``EXCHANGE:NAME``, case-insensitively.

        Args:
            symbol_name: Symbol name, optionally prefixed with the exchange

        Returns:
            SymbolRecord or None if no symbol matches
        """
        if ":" in symbol_name:
            exchange, name = symbol_name.split(":", 1)
        else:
            exchange, name = "", symbol_name
        exchange = exchange.upper()
        name = name.upper()

        for record in self._symbols:
            if record.name.upper() != name:
                continue
            if not exchange or exchange == record.exchange.upper():
                return record
        return None

    def search(
        self,
        query: Optional[str],
        symbol_type: Optional[str] = None,
        exchange: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SymbolRecord]:
        """
        Search the catalogue.

        Matches in the name rank by position; description-only matches rank
        after every name match. An empty query matches everything.

        Args:
            query: Search text
            symbol_type: Only return symbols of this type when set
            exchange: Only return symbols of this exchange when set
            limit: Maximum number of results (50 when not set)

        Returns:
            List of matching records, best first
        """
        max_results = limit or DEFAULT_SEARCH_LIMIT
        needle = (query or "").upper()
        weighted = []

        for record in self._symbols:
            if symbol_type and record.type != symbol_type:
                continue
            if exchange and record.exchange != exchange:
                continue

            position_in_name = record.name.upper().find(needle)
            position_in_description = record.description.upper().find(needle)
            if not needle or position_in_name >= 0 or position_in_description >= 0:
                if position_in_name >= 0:
                    weight = position_in_name
                else:
                    weight = DESCRIPTION_MATCH_WEIGHT + position_in_description
                weighted.append((weight, record))

        weighted.sort(key=lambda item: item[0])
        return [record for _, record in weighted[:max_results]]


# Global catalogue instance
_symbols_database: Optional[SymbolsDatabase] = None


def get_symbols_database() -> SymbolsDatabase:
    """Get or create the symbols database instance."""
    global _symbols_database
    if _symbols_database is None:
        _symbols_database = SymbolsDatabase()
    return _symbols_database
