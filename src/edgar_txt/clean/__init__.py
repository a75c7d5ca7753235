"""Text cleaning for downloaded filings.

Provides the ordered transform chain that turns filing HTML into stable,
analysis-ready plaintext with a metadata header.
"""
