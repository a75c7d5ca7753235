from __future__ import annotations

import pytest

from edgar_txt.errors import ResolutionError, ThrottleExhausted
from edgar_txt.ingest.resolve import COMPANY_TICKERS_URL, IdentityResolver
from edgar_txt.models import Identifier

TICKERS = {
    "0": {"cik_str": 320193, "ticker": "AAPL", "title": "Apple Inc."},
    "1": {"cik_str": 789019, "ticker": "MSFT", "title": "MICROSOFT CORP"},
    "2": {"cik_str": 123456, "ticker": "ACME", "title": "Acme Corp"},
}


def test_resolve_is_case_insensitive(make_dispatcher, make_response) -> None:
    dispatcher, _ = make_dispatcher({COMPANY_TICKERS_URL: make_response(200, TICKERS)})
    resolver = IdentityResolver(dispatcher)
    assert resolver.resolve("aapl") == resolver.resolve("AAPL") == Identifier(320193)
    assert resolver.resolve("  msft ") == Identifier(789019)


def test_identifier_is_zero_padded(make_dispatcher, make_response) -> None:
    dispatcher, _ = make_dispatcher({COMPANY_TICKERS_URL: make_response(200, TICKERS)})
    ident = IdentityResolver(dispatcher).resolve("ACME")
    assert ident.padded == "0000123456"
    assert ident.unpadded == "123456"
    assert str(ident) == "0000123456"


def test_resolve_unknown_symbol(make_dispatcher, make_response) -> None:
    dispatcher, _ = make_dispatcher({COMPANY_TICKERS_URL: make_response(200, TICKERS)})
    with pytest.raises(ResolutionError, match="ZZZZ"):
        IdentityResolver(dispatcher).resolve("ZZZZ")


def test_ticker_map_is_fetched_once_per_resolver(make_dispatcher, make_response) -> None:
    dispatcher, session = make_dispatcher({COMPANY_TICKERS_URL: make_response(200, TICKERS)})
    resolver = IdentityResolver(dispatcher)
    resolver.resolve("AAPL")
    resolver.resolve("MSFT")
    with pytest.raises(ResolutionError):
        resolver.resolve("NOPE")
    assert session.calls == [COMPANY_TICKERS_URL]


def test_ticker_map_http_error_is_resolution_error(make_dispatcher, make_response) -> None:
    dispatcher, _ = make_dispatcher({COMPANY_TICKERS_URL: make_response(403, b"Forbidden")})
    with pytest.raises(ResolutionError, match="HTTP 403"):
        IdentityResolver(dispatcher).resolve("AAPL")


def test_ticker_map_bad_json_is_resolution_error(make_dispatcher, make_response) -> None:
    dispatcher, _ = make_dispatcher({COMPANY_TICKERS_URL: make_response(200, b"<html>oops</html>")})
    with pytest.raises(ResolutionError):
        IdentityResolver(dispatcher).resolve("AAPL")


def test_ticker_map_throttling_propagates(make_dispatcher, make_response) -> None:
    dispatcher, _ = make_dispatcher({COMPANY_TICKERS_URL: make_response(429)}, max_attempts=2)
    with pytest.raises(ThrottleExhausted):
        IdentityResolver(dispatcher).resolve("AAPL")
