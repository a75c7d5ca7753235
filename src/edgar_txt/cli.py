"""Command-line interface for the filing downloader.

Usage: `edgar-txt MSFT AAPL --forms 10-K 10-Q --max-files 10`. Without
symbols the user is prompted for one ticker.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

from edgar_txt.config import get_settings
from edgar_txt.logging_config import configure_logging
from edgar_txt.pipeline import normalize_symbols, run

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _prompt_symbol() -> list[str]:
    """Ask for a single ticker on stdin; returns an empty list on EOF/blank."""
    try:
        raw = input("Enter Ticker (e.g. MSFT): ")
    except EOFError:
        return []
    return normalize_symbols([raw])


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(
        prog="edgar-txt",
        description="Download recent SEC filings and convert them to clean text.",
    )
    p.add_argument("symbols", nargs="*", help="Ticker symbols, e.g. MSFT AAPL")
    p.add_argument("--forms", nargs="+", default=None, help="Form types to keep (default: 10-K 10-Q)")
    p.add_argument("--max-files", type=int, default=None, help="Maximum filings per ticker")
    p.add_argument("--output-dir", type=Path, default=None, help="Root directory for filings_<TICKER>")
    p.add_argument("--log-file", type=Path, default=None)
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: parse args, configure logging and run the pipeline.

    Returns:
        0 on success, 1 if any failure was recorded, 2 if no ticker was given.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    settings = get_settings()
    overrides: dict[str, object] = {}
    if args.forms:
        overrides["allowed_forms"] = tuple(f.strip().upper() for f in args.forms)
    if args.max_files is not None:
        overrides["max_files"] = args.max_files
    if args.output_dir is not None:
        overrides["output_root"] = args.output_dir
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    symbols = normalize_symbols(args.symbols) or _prompt_symbol()
    if not symbols:
        log.error("No ticker provided. Exiting.")
        return 2

    summary = run(symbols, settings)
    return 1 if summary.has_failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
