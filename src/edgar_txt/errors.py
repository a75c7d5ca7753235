"""Exception taxonomy.

Symbol-scoped errors (`ResolutionError`, `CatalogFetchError`) abort the
current ticker only. Entry-scoped errors (`DocumentFetchError`, `WriteError`)
are turned into FAILED outcomes by the document fetcher and never escape it.
`ThrottleExhausted` is raised by the dispatcher; its caller decides the scope.
"""

from __future__ import annotations


class EdgarTxtError(Exception):
    """Base class for all errors raised by edgar_txt."""


class DispatchError(EdgarTxtError):
    """A request could not be completed (transport failure, timeout)."""


class ThrottleExhausted(DispatchError):
    """SEC kept answering 429 until the attempt budget ran out."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"retries exhausted after {attempts} throttled attempts: {url}")
        self.url = url
        self.attempts = attempts


class ResolutionError(EdgarTxtError):
    """A ticker symbol could not be mapped to a CIK."""


class CatalogFetchError(EdgarTxtError):
    """The submissions catalog for a CIK could not be fetched or decoded."""


class DocumentFetchError(EdgarTxtError):
    """A single filing document could not be downloaded."""


class WriteError(EdgarTxtError):
    """Normalized text could not be persisted to disk."""
