"""Ordered normalization chain: filing HTML → clean plaintext.

Each stage is a pure `str -> str` function. Order matters: later stages
assume the guarantees of earlier ones (e.g. whitespace-only lines are blanked
before newline runs are collapsed). `STAGES` lists them in execution order.
`clean_text` (stages 2-8) is idempotent on its own output.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

import html2text

log = logging.getLogger(__name__)

NBSP = "\u00a0"

SCHEMA_LINE_RE = re.compile(r"^[^\S\n]*(?:https?|xmlns|xbrli):.*$", re.MULTILINE)
DRIFT_OPEN_RE = re.compile(r"([$(\-])\s+")
DRIFT_CLOSE_RE = re.compile(r"\s+\)")
WHITESPACE_LINE_RE = re.compile(r"^[^\S\n]+$", re.MULTILINE)
PAGE_LINE_RE = re.compile(r"^[^\S\n]*(?:\d+|[Pp]age[^\S\n]+\d+)[^\S\n]*$", re.MULTILINE)
MULTI_NEWLINE_RE = re.compile(r"\n{3,}")

# Markdown left behind by html2text
LINE_EDGE_RE = re.compile(r"^[^\S\n]+|[^\S\n]+$", re.MULTILINE)
RULE_LINE_RE = re.compile(r"^(?:\* \* \*|[-|: ]*-{3}[-|: ]*)$", re.MULTILINE)
HEADING_MARK_RE = re.compile(r"^#{1,6}[^\S\n]+", re.MULTILINE)
BULLET_MARK_RE = re.compile(r"^\*[^\S\n]+", re.MULTILINE)
TABLE_ROW_RE = re.compile(r"^.*\|.*$", re.MULTILINE)
MD_ESCAPE_RE = re.compile(r"\\([\\`*_{}\[\]()#+\-.!>])")

# cells that belong to their neighbour, e.g. "$" | "1,000" or "(500" | ")"
CELL_OPENERS = {"$", "(", "$("}
CELL_CLOSERS = (")", "%")

HEADER_TEMPLATE = (
    "--- METADATA ---\n"
    "COMPANY: {entity}\n"
    "CIK: {identifier}\n"
    "FORM: {form}\n"
    "DATE: {filing_date}\n"
    "----------------\n"
    "\n"
)


@dataclass(frozen=True)
class DocumentMetadata:
    """Context written in the header of every normalized file."""
    entity: str
    identifier: str
    form: str
    filing_date: str


def decode_html(raw: bytes) -> str:
    """Decode document bytes as UTF-8, falling back to latin-1."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _join_cells(match: re.Match[str]) -> str:
    merged: list[str] = []
    for cell in (c.strip() for c in match.group(0).split("|")):
        if not cell:
            continue
        if merged and (merged[-1] in CELL_OPENERS or cell.startswith(CELL_CLOSERS)):
            merged[-1] += cell
        else:
            merged.append(cell)
    return " | ".join(merged)


def strip_markdown(text: str) -> str:
    """Remove the Markdown syntax html2text adds around otherwise plain text.

    Line indentation and hard-break spaces, heading hashes, bullet markers,
    horizontal rules and table underlines are dropped. Table rows keep one
    ` | ` between non-empty cells, with currency and percent cells glued to
    the figure they belong to. Backslash escapes are removed last so escaped
    leading `-`/`+` are not mistaken for bullets.
    """
    text = LINE_EDGE_RE.sub("", text)
    text = RULE_LINE_RE.sub("", text)
    text = HEADING_MARK_RE.sub("", text)
    text = BULLET_MARK_RE.sub("", text)
    text = TABLE_ROW_RE.sub(_join_cells, text)
    return MD_ESCAPE_RE.sub(r"\1", text)


def html_to_text(html: str) -> str:
    """Stage 1: render markup as plain text.

    Line endings are unified to `\\n` first. Links, images and emphasis are
    dropped, lines are not wrapped, and table rows come out as
    `cell | cell` without padding.
    """
    html = html.replace("\r\n", "\n").replace("\r", "\n")
    h = html2text.HTML2Text()
    h.ignore_links = True
    h.ignore_images = True
    h.ignore_emphasis = True
    h.pad_tables = False
    h.body_width = 0
    h.unicode_snob = True
    h.ul_item_mark = "*"
    return strip_markdown(h.handle(html))


def replace_nbsp(text: str) -> str:
    """Stage 2: non-breaking spaces become ordinary spaces."""
    return text.replace(NBSP, " ")


def strip_schema_lines(text: str) -> str:
    """Stage 3: empty lines that start with http:, https:, xmlns: or xbrli:.

    Inline XBRL leaves runs of namespace and schema URIs in the text output.
    """
    return SCHEMA_LINE_RE.sub("", text)


def fix_drifted_symbols(text: str) -> str:
    """Stage 4: glue `$`, `(` and `-` to the token that follows them.

    Whitespace in front of `)` is removed as well, so `$ 1,000` becomes
    `$1,000` and `(  500 )` becomes `(500)`. Post: no whitespace follows
    `$(-` and none precedes `)`.
    """
    text = DRIFT_OPEN_RE.sub(r"\1", text)
    return DRIFT_CLOSE_RE.sub(")", text)


def blank_whitespace_lines(text: str) -> str:
    """Stage 5: lines of only horizontal whitespace become empty lines."""
    return WHITESPACE_LINE_RE.sub("", text)


def strip_page_numbers(text: str) -> str:
    """Stage 6: empty lines holding only a page number or `Page N`."""
    return PAGE_LINE_RE.sub("", text)


def collapse_blank_lines(text: str) -> str:
    """Stage 7: three or more consecutive newlines become exactly two."""
    return MULTI_NEWLINE_RE.sub("\n\n", text)


def trim(text: str) -> str:
    """Stage 8: strip leading and trailing whitespace."""
    return text.strip()


def render_header(meta: DocumentMetadata) -> str:
    """Stage 9 header block, ending with a blank separator line."""
    return HEADER_TEMPLATE.format(
        entity=meta.entity,
        identifier=meta.identifier,
        form=meta.form,
        filing_date=meta.filing_date,
    )


Stage = Callable[[str], str]

STAGES: list[tuple[str, Stage]] = [
    ("html_to_text", html_to_text),
    ("replace_nbsp", replace_nbsp),
    ("strip_schema_lines", strip_schema_lines),
    ("fix_drifted_symbols", fix_drifted_symbols),
    ("blank_whitespace_lines", blank_whitespace_lines),
    ("strip_page_numbers", strip_page_numbers),
    ("collapse_blank_lines", collapse_blank_lines),
    ("trim", trim),
]

TEXT_STAGES = STAGES[1:]


def clean_text(text: str) -> str:
    """Run stages 2-8 on already extracted text."""
    for _, stage in TEXT_STAGES:
        text = stage(text)
    return text


def normalize(raw: bytes, meta: DocumentMetadata) -> str:
    """Convert raw document bytes into header + normalized body text."""
    text = html_to_text(decode_html(raw))
    body = clean_text(text)
    log.debug(
        "Normalized %s %s: %d bytes in, %d chars out",
        meta.form,
        meta.filing_date,
        len(raw),
        len(body),
    )
    return render_header(meta) + body
