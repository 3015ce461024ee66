"""
Unit tests for the symbol catalogue.
"""

import pytest

from candlefeed.services.symbols import SymbolRecord, SymbolsDatabase


@pytest.fixture
def database():
    return SymbolsDatabase()


def test_lookup_by_name_is_case_insensitive(database):
    assert database.lookup("eur_usd").name == "EUR_USD"


def test_lookup_with_exchange_prefix(database):
    assert database.lookup("oanda:GBP_USD").name == "GBP_USD"
    assert database.lookup("NYSE:GBP_USD") is None


def test_lookup_unknown(database):
    assert database.lookup("USD_JPY") is None


def test_search_name_matches_rank_before_description_matches(database):
    database.add_symbols(
        [SymbolRecord(name="AUD_USD", ticker="AUD_USD", description="Australian Dollar/GBP", exchange="Oanda", type="forex")]
    )
    results = database.search("GBP", limit=10)
    assert [record.name for record in results] == ["GBP_USD", "AUD_USD"]


def test_search_by_description(database):
    results = database.search("pound", limit=10)
    assert [record.name for record in results] == ["GBP_USD"]


def test_search_empty_query_matches_everything(database):
    assert len(database.search("", limit=10)) == 2


def test_search_filters_by_type_and_exchange(database):
    assert database.search("", symbol_type="stock", limit=10) == []
    assert database.search("", exchange="NYSE", limit=10) == []
    assert len(database.search("", symbol_type="forex", exchange="Oanda", limit=10)) == 2


def test_search_respects_limit(database):
    assert len(database.search("USD", limit=1)) == 1


def test_symbol_info_fields(database):
    info = database.lookup("EUR_USD").to_symbol_info()

    assert info["exchange-traded"] == "Oanda"
    assert info["exchange-listed"] == "Oanda"
    assert info["timezone"] == "Etc/UTC"
    assert info["pricescale"] == 100000
    assert info["has_no_volume"] is True
    assert info["description"] == "Euro/USD"
    assert info["ticker"] == "EUR_USD"
    assert info["minmov"] == 1 and info["minmov2"] == 0 and info["pointvalue"] == 1


def test_symbol_info_description_falls_back_to_name():
    record = SymbolRecord(name="acme", ticker="acme", description="", exchange="NYSE", type="stock")
    info = record.to_symbol_info()
    assert info["description"] == "acme"
    assert info["has_no_volume"] is False
    assert info["ticker"] == "ACME"
