"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads environment variables (including a check that `SEC_USER_AGENT` is
present, since SEC rejects anonymous clients).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

from edgar_txt.ingest.select import DEFAULT_FORMS, MAX_FILES_TO_FETCH as DEFAULT_MAX_FILES

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    """Container for downloader configuration read from the environment.

    Attributes:
        sec_user_agent: Required SEC User-Agent header for every request.
        output_root: Directory under which `filings_<TICKER>` folders are created.
        allowed_forms: Form types kept by the selector (e.g. 10-K, 10-Q).
        max_files: Maximum number of filings downloaded per ticker.
        rate_limit: Token bucket refill rate in requests per second.
        burst: Token bucket capacity.
        max_attempts: Attempts per request before giving up on 429 responses.
        retry_base_delay: Linear back-off step in seconds when no Retry-After is usable.
        timeout: Per-request timeout in seconds.
    """
    sec_user_agent: str
    output_root: Path = Path(".")
    allowed_forms: tuple[str, ...] = DEFAULT_FORMS
    max_files: int = DEFAULT_MAX_FILES
    rate_limit: float = 8.0
    burst: int = 8
    max_attempts: int = 5
    retry_base_delay: float = 5.0
    timeout: float = 45.0


def _parse_forms(raw: str) -> tuple[str, ...]:
    forms = tuple(f.strip().upper() for f in raw.split(",") if f.strip())
    return forms or DEFAULT_FORMS


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from e


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `SEC_USER_AGENT` is not set, if a numeric variable
            does not parse, or if the rate limit settings are inconsistent
            (burst smaller than the rate).
    """
    sec_user_agent = os.getenv("SEC_USER_AGENT", "").strip()
    output_root = Path(os.getenv("EDGAR_TXT_OUTPUT_DIR", "."))
    allowed_forms = _parse_forms(os.getenv("EDGAR_TXT_FORMS", ",".join(DEFAULT_FORMS)))
    max_files = _env_int("EDGAR_TXT_MAX_FILES", DEFAULT_MAX_FILES)
    rate_limit = _env_float("SEC_RATE_LIMIT", 8.0)
    burst = _env_int("SEC_BURST", 8)
    max_attempts = _env_int("SEC_MAX_ATTEMPTS", 5)
    retry_base_delay = _env_float("SEC_RETRY_BASE_DELAY", 5.0)
    timeout = _env_float("SEC_TIMEOUT", 45.0)

    if not sec_user_agent:
        raise RuntimeError(
            "SEC_USER_AGENT is required. Set it in .env "
            "(example: 'Your Name your.email@example.com')."
        )
    if burst < rate_limit:
        raise RuntimeError(
            f"SEC_BURST ({burst}) must be >= SEC_RATE_LIMIT ({rate_limit})."
        )
    if max_attempts < 1:
        raise RuntimeError("SEC_MAX_ATTEMPTS must be at least 1.")

    return Settings(
        sec_user_agent=sec_user_agent,
        output_root=output_root,
        allowed_forms=allowed_forms,
        max_files=max_files,
        rate_limit=rate_limit,
        burst=burst,
        max_attempts=max_attempts,
        retry_base_delay=retry_base_delay,
        timeout=timeout,
    )
