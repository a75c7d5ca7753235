"""Records passed between the ingest, clean and pipeline stages.

Pydantic models validate the two SEC JSON payloads (ticker map and
submissions catalog). Plain dataclasses carry the per-run results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

CIK_WIDTH = 10


@dataclass(frozen=True)
class Identifier:
    """SEC Central Index Key for one entity.

    Attributes:
        cik: Numeric CIK as published in the ticker map.
    """
    cik: int

    @property
    def padded(self) -> str:
        """Zero-padded 10-digit form used by data.sec.gov endpoints."""
        return str(self.cik).zfill(CIK_WIDTH)

    @property
    def unpadded(self) -> str:
        """Bare integer form used in Archives paths."""
        return str(self.cik)

    def __str__(self) -> str:
        return self.padded


class TickerRecord(BaseModel):
    """One value of `company_tickers.json`."""
    model_config = ConfigDict(extra="ignore")
    cik_str: int = Field(..., ge=0)
    ticker: str
    title: str | None = None


class CatalogEntry(BaseModel):
    """One filing from the submissions catalog.

    Attributes:
        form: Form type tag (e.g. '10-K').
        accession_number: Accession number with dashes, e.g. '0000320193-24-000123'.
        primary_document: File name of the primary document in the filing folder.
        filing_date: Filing date as a `YYYY-MM-DD` string.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    form: str
    accession_number: str
    primary_document: str
    filing_date: str

    @property
    def accession_path(self) -> str:
        """Accession number with separators stripped, as used in Archives URLs."""
        return self.accession_number.replace("-", "")

    @property
    def output_name(self) -> str:
        """Deterministic output file name `{filing_date}_{form}.txt`."""
        return f"{self.filing_date}_{self.form.replace('/', '_')}.txt"


class RecentFilings(BaseModel):
    """Parallel arrays under `filings.recent` in the submissions JSON."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    accession_number: list[str] = Field(default_factory=list, alias="accessionNumber")
    filing_date: list[str] = Field(default_factory=list, alias="filingDate")
    form: list[str] = Field(default_factory=list)
    primary_document: list[str] = Field(default_factory=list, alias="primaryDocument")

    @model_validator(mode="after")
    def _check_aligned(self) -> "RecentFilings":
        lengths = {
            len(self.accession_number),
            len(self.filing_date),
            len(self.form),
            len(self.primary_document),
        }
        if len(lengths) != 1:
            raise ValueError(
                "filings.recent arrays are not aligned: "
                f"accessionNumber={len(self.accession_number)} "
                f"filingDate={len(self.filing_date)} "
                f"form={len(self.form)} "
                f"primaryDocument={len(self.primary_document)}"
            )
        return self

    def entries(self) -> list[CatalogEntry]:
        """Zip the parallel arrays into ordered `CatalogEntry` records."""
        return [
            CatalogEntry(
                form=form,
                accession_number=acc,
                primary_document=doc,
                filing_date=date,
            )
            for form, acc, doc, date in zip(
                self.form, self.accession_number, self.primary_document, self.filing_date
            )
        ]


class _Filings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    recent: RecentFilings = Field(default_factory=RecentFilings)


class Submissions(BaseModel):
    """Subset of `CIK##########.json` needed to build the catalog."""
    model_config = ConfigDict(extra="ignore")
    cik: str | None = None
    name: str | None = None
    filings: _Filings = Field(default_factory=_Filings)


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DownloadOutcome:
    """Result of fetching one catalog entry.

    Attributes:
        status: SUCCESS, SKIPPED (file already present) or FAILED.
        entry: The catalog entry that was processed.
        path: Target file path.
        reason: Failure message (empty unless FAILED).
    """
    status: OutcomeStatus
    entry: CatalogEntry
    path: Path
    reason: str = ""

    @classmethod
    def success(cls, entry: CatalogEntry, path: Path) -> "DownloadOutcome":
        return cls(OutcomeStatus.SUCCESS, entry, path)

    @classmethod
    def skipped(cls, entry: CatalogEntry, path: Path) -> "DownloadOutcome":
        return cls(OutcomeStatus.SKIPPED, entry, path)

    @classmethod
    def failed(cls, entry: CatalogEntry, path: Path, reason: str) -> "DownloadOutcome":
        return cls(OutcomeStatus.FAILED, entry, path, reason)


@dataclass
class Summary:
    """Run-level tally of outcomes plus the literal failure messages."""
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    failures: list[str] = field(default_factory=list)

    def record(self, outcome: DownloadOutcome, symbol: str = "") -> None:
        if outcome.status is OutcomeStatus.SUCCESS:
            self.processed += 1
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            prefix = f"{symbol} " if symbol else ""
            self.failures.append(
                f"{prefix}{outcome.entry.form} {outcome.entry.filing_date}: {outcome.reason}"
            )

    def add_failure(self, message: str) -> None:
        """Record a symbol-level failure (resolution, catalog, throttling)."""
        self.failures.append(message)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
