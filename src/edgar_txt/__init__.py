"""edgar_txt package.

Downloads SEC EDGAR filings for a list of ticker symbols and converts each
primary document into clean plaintext suitable for text analysis.

Architecture:
- A single `Dispatcher` owns every outbound request (token bucket + 429 retry)
- `ingest` resolves tickers, fetches the submissions catalog and documents
- `clean` turns raw HTML into stable text through an ordered transform chain
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
