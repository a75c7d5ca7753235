"""Fetch the submissions catalog for a CIK and decode it into ordered entries.

The SEC payload stores recent filings as parallel arrays under
`filings.recent`. They are zipped into `CatalogEntry` records here, once, so
nothing downstream has to keep indexes aligned. Entry order is the order SEC
returns (newest first); it is not re-sorted.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from edgar_txt.dispatcher import Dispatcher
from edgar_txt.errors import CatalogFetchError, DispatchError, ThrottleExhausted
from edgar_txt.models import CatalogEntry, Identifier, Submissions

log = logging.getLogger(__name__)

SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK{cik}.json"


def submissions_url(identifier: Identifier) -> str:
    """Return the data.sec.gov submissions URL for a CIK."""
    return SUBMISSIONS_URL.format(cik=identifier.padded)


def decode_catalog(payload: Any) -> list[CatalogEntry]:
    """Decode a submissions JSON payload into ordered catalog entries.

    Raises:
        CatalogFetchError: if the payload does not match the expected schema
            or its parallel arrays have different lengths.
    """
    try:
        subs = Submissions.model_validate(payload)
    except ValidationError as e:
        raise CatalogFetchError(f"invalid submissions payload: {e}") from e
    return subs.filings.recent.entries()


def fetch_catalog(dispatcher: Dispatcher, identifier: Identifier) -> list[CatalogEntry]:
    """Download and decode the filing catalog for `identifier`.

    Raises:
        CatalogFetchError: on transport failure, non-200 status or bad payload.
        ThrottleExhausted: if SEC throttled every attempt.
    """
    url = submissions_url(identifier)
    try:
        status, payload = dispatcher.get_json(url)
    except ThrottleExhausted:
        raise
    except DispatchError as e:
        raise CatalogFetchError(str(e)) from e
    except ValueError as e:
        raise CatalogFetchError(f"submissions for CIK {identifier} are not valid JSON: {e}") from e

    if status != 200:
        raise CatalogFetchError(f"submissions fetch failed for CIK {identifier}: HTTP {status}")

    entries = decode_catalog(payload)
    log.info("Catalog for CIK %s has %d recent filings", identifier, len(entries))
    return entries
