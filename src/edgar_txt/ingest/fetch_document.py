"""Download one filing's primary document and write its normalized text.

Downloads are incremental: if the target file already exists the entry is
reported as SKIPPED and no request is made. Every failure scoped to a single
entry is returned as a FAILED outcome instead of being raised.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from edgar_txt.clean.normalize import DocumentMetadata, normalize
from edgar_txt.dispatcher import Dispatcher
from edgar_txt.errors import DispatchError, DocumentFetchError, WriteError
from edgar_txt.models import CatalogEntry, DownloadOutcome, Identifier

log = logging.getLogger(__name__)

ARCHIVES_BASE = "https://www.sec.gov/Archives/edgar/data"


def document_url(identifier: Identifier, entry: CatalogEntry) -> str:
    """Return the Archives URL of an entry's primary document."""
    return f"{ARCHIVES_BASE}/{identifier.unpadded}/{entry.accession_path}/{entry.primary_document}"


def _write_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(path.name + ".part")
    try:
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise WriteError(f"could not write {path}: {e}") from e


class DocumentFetcher:
    """Fetches, normalizes and saves filing documents via a shared dispatcher."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher

    def _download(self, identifier: Identifier, entry: CatalogEntry) -> bytes:
        url = document_url(identifier, entry)
        try:
            resp = self.dispatcher.send(url)
        except DispatchError as e:
            raise DocumentFetchError(str(e)) from e
        if resp.status_code != 200:
            raise DocumentFetchError(f"HTTP {resp.status_code} for {url}")
        return resp.content

    def fetch(
        self,
        identifier: Identifier,
        entry: CatalogEntry,
        output_dir: Path,
        entity: str,
    ) -> DownloadOutcome:
        """Fetch `entry` into `output_dir` unless it is already there.

        Args:
            identifier: CIK of the filer.
            entry: Catalog entry to download.
            output_dir: Per-ticker output directory (created if missing).
            entity: Company context written into the metadata header.

        Returns:
            SUCCESS, SKIPPED (file existed, no request made) or FAILED with a reason.
        """
        target = output_dir / entry.output_name
        if target.exists():
            log.debug("Skip existing %s", target)
            return DownloadOutcome.skipped(entry, target)

        try:
            raw = self._download(identifier, entry)
            text = normalize(
                raw,
                DocumentMetadata(
                    entity=entity,
                    identifier=identifier.padded,
                    form=entry.form,
                    filing_date=entry.filing_date,
                ),
            )
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise WriteError(f"could not create {output_dir}: {e}") from e
            _write_atomic(target, text)
        except (DocumentFetchError, WriteError) as e:
            log.warning("%s %s failed: %s", entry.form, entry.filing_date, e)
            return DownloadOutcome.failed(entry, target, str(e))

        log.info("Saved %s", target)
        return DownloadOutcome.success(entry, target)
