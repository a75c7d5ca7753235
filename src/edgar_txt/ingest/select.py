"""Pick the filings to download from a catalog."""

from __future__ import annotations

from typing import Iterable, Sequence

from edgar_txt.models import CatalogEntry

DEFAULT_FORMS = ("10-K", "10-Q")
MAX_FILES_TO_FETCH = 10


def select_filings(
    catalog: Sequence[CatalogEntry],
    allowed_forms: Iterable[str] = DEFAULT_FORMS,
    cap: int = MAX_FILES_TO_FETCH,
) -> list[CatalogEntry]:
    """Return the first `cap` entries whose form is in `allowed_forms`.

    Catalog order is preserved; nothing is re-sorted by date.

    Args:
        catalog: Entries in source order.
        allowed_forms: Form tags to keep (exact match).
        cap: Maximum number of entries to return.

    Raises:
        ValueError: if `cap` is negative.
    """
    if cap < 0:
        raise ValueError("cap must be >= 0")

    allowed = set(allowed_forms)
    selected: list[CatalogEntry] = []
    for entry in catalog:
        if len(selected) >= cap:
            break
        if entry.form in allowed:
            selected.append(entry)
    return selected
