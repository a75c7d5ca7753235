"""Run the download pipeline for one or more ticker symbols.

ticker → CIK → submissions catalog → selection → per-filing download and
normalization. Symbols and filings are processed strictly one after another.
Errors scoped to a ticker (unknown symbol, catalog failure, sustained
throttling on the catalog) skip to the next ticker; errors scoped to one
filing are recorded and the loop continues.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from edgar_txt.config import Settings
from edgar_txt.dispatcher import Dispatcher
from edgar_txt.errors import CatalogFetchError, ResolutionError, ThrottleExhausted
from edgar_txt.ingest.catalog import fetch_catalog
from edgar_txt.ingest.fetch_document import DocumentFetcher
from edgar_txt.ingest.resolve import IdentityResolver
from edgar_txt.ingest.select import select_filings
from edgar_txt.models import Summary

log = logging.getLogger(__name__)


def output_dir_for(output_root: Path, symbol: str) -> Path:
    """Return the per-ticker output directory, e.g. `<root>/filings_MSFT`."""
    return output_root / f"filings_{symbol}"


def normalize_symbols(symbols: Iterable[str]) -> list[str]:
    """Upper-case and strip symbols, dropping blanks."""
    return [s.strip().upper() for s in symbols if s and s.strip()]


def dispatcher_from_settings(settings: Settings) -> Dispatcher:
    """Build the run's single `Dispatcher` from configuration."""
    return Dispatcher(
        settings.sec_user_agent,
        rate=settings.rate_limit,
        burst=settings.burst,
        max_attempts=settings.max_attempts,
        base_delay=settings.retry_base_delay,
        timeout=settings.timeout,
    )


def process_symbol(
    symbol: str,
    *,
    resolver: IdentityResolver,
    fetcher: DocumentFetcher,
    dispatcher: Dispatcher,
    settings: Settings,
    summary: Summary,
) -> None:
    """Download and normalize the selected filings of a single ticker.

    Symbol-level failures are logged and appended to `summary`; they are not
    raised so the caller can move on to the next ticker.
    """
    log.info("Ticker: %s", symbol)

    try:
        identifier = resolver.resolve(symbol)
        log.info("%s → CIK %s", symbol, identifier)
        catalog = fetch_catalog(dispatcher, identifier)
    except (ResolutionError, CatalogFetchError, ThrottleExhausted) as e:
        log.error("%s: %s", symbol, e)
        summary.add_failure(f"{symbol}: {e}")
        return

    selected = select_filings(catalog, settings.allowed_forms, settings.max_files)
    if not selected:
        log.warning("%s: no recent %s filings found", symbol, "/".join(settings.allowed_forms))
        return

    out_dir = output_dir_for(settings.output_root, symbol)
    log.info("%s: processing %d filing(s) into %s", symbol, len(selected), out_dir)

    for idx, entry in enumerate(selected, start=1):
        log.info("[%d/%d] %s (%s)", idx, len(selected), entry.form, entry.filing_date)
        outcome = fetcher.fetch(identifier, entry, out_dir, entity=symbol)
        summary.record(outcome, symbol)

    log.info("%s: files saved in %s", symbol, out_dir)


def run(
    symbols: Iterable[str],
    settings: Settings,
    dispatcher: Dispatcher | None = None,
) -> Summary:
    """Process every symbol sequentially and return the run summary.

    Args:
        symbols: Ticker symbols (any case; blanks are ignored).
        settings: Run configuration.
        dispatcher: Optional pre-built dispatcher. When omitted one is built
            from `settings` and closed at the end of the run.
    """
    summary = Summary()
    owns_dispatcher = dispatcher is None
    if dispatcher is None:
        dispatcher = dispatcher_from_settings(settings)

    try:
        resolver = IdentityResolver(dispatcher)
        fetcher = DocumentFetcher(dispatcher)
        for symbol in normalize_symbols(symbols):
            process_symbol(
                symbol,
                resolver=resolver,
                fetcher=fetcher,
                dispatcher=dispatcher,
                settings=settings,
                summary=summary,
            )
    finally:
        if owns_dispatcher:
            dispatcher.close()

    log.info(
        "Run complete: processed=%d skipped=%d failed=%d",
        summary.processed,
        summary.skipped,
        summary.failed,
    )
    for msg in summary.failures:
        log.warning("Failure: %s", msg)
    return summary
