"""Ticker → CIK resolution against SEC's `company_tickers.json`."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from edgar_txt.dispatcher import Dispatcher
from edgar_txt.errors import DispatchError, ResolutionError, ThrottleExhausted
from edgar_txt.models import Identifier, TickerRecord

log = logging.getLogger(__name__)

COMPANY_TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"


class IdentityResolver:
    """Resolve ticker symbols to CIKs.

    The ticker map is identical for every symbol, so it is downloaded once
    per resolver and reused for the rest of the run.
    """

    def __init__(self, dispatcher: Dispatcher, url: str = COMPANY_TICKERS_URL) -> None:
        self.dispatcher = dispatcher
        self.url = url
        self._records: list[TickerRecord] | None = None

    def _load(self) -> list[TickerRecord]:
        if self._records is not None:
            return self._records

        log.info("Downloading ticker map %s", self.url)
        try:
            status, payload = self.dispatcher.get_json(self.url)
        except ThrottleExhausted:
            raise
        except DispatchError as e:
            raise ResolutionError(f"ticker map unavailable: {e}") from e
        except ValueError as e:
            raise ResolutionError(f"ticker map is not valid JSON: {e}") from e

        if status != 200:
            raise ResolutionError(f"ticker map fetch failed: HTTP {status}")
        if not isinstance(payload, dict):
            raise ResolutionError("ticker map has unexpected shape")

        try:
            records = [TickerRecord.model_validate(v) for v in payload.values()]
        except ValidationError as e:
            raise ResolutionError(f"ticker map has invalid records: {e}") from e

        log.info("Ticker map loaded (%d entries)", len(records))
        self._records = records
        return records

    def resolve(self, symbol: str) -> Identifier:
        """Return the CIK for `symbol` (case-insensitive).

        Raises:
            ResolutionError: if the symbol is unknown or the map cannot be loaded.
            ThrottleExhausted: if SEC throttled every attempt.
        """
        wanted = symbol.strip().upper()
        for rec in self._load():
            if rec.ticker.upper() == wanted:
                return Identifier(rec.cik_str)
        raise ResolutionError(f"ticker not found: {symbol}")
