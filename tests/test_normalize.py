from __future__ import annotations

import pytest

from edgar_txt.clean.normalize import (
    STAGES,
    DocumentMetadata,
    blank_whitespace_lines,
    clean_text,
    collapse_blank_lines,
    decode_html,
    fix_drifted_symbols,
    html_to_text,
    normalize,
    render_header,
    strip_markdown,
    replace_nbsp,
    strip_page_numbers,
    strip_schema_lines,
    trim,
)

META = DocumentMetadata(entity="ACME", identifier="0000123456", form="10-K", filing_date="2024-02-01")


def test_stage_order() -> None:
    assert [name for name, _ in STAGES] == [
        "html_to_text",
        "replace_nbsp",
        "strip_schema_lines",
        "fix_drifted_symbols",
        "blank_whitespace_lines",
        "strip_page_numbers",
        "collapse_blank_lines",
        "trim",
    ]


def test_html_to_text_drops_markup_links_and_emphasis() -> None:
    out = html_to_text(
        '<html><head><style>p {color: red}</style></head>'
        '<body><p>Hello <b>world</b> <a href="https://example.com/x">here</a></p>'
        "<table><tr><td>Revenue</td></tr></table></body></html>"
    )
    assert "Hello world here" in out
    assert "Revenue" in out
    assert "**" not in out
    assert "example.com" not in out
    assert "<" not in out


def test_html_to_text_keeps_table_cells_apart() -> None:
    out = html_to_text(
        "<table>"
        "<tr><td>Total revenue</td><td>1,000</td><td>2,000</td></tr>"
        "<tr><td>Net loss</td><td>$</td><td>(500</td><td>)</td></tr>"
        "<tr><td>Margin</td><td></td><td>12.5</td><td>%</td></tr>"
        "</table>"
    )
    lines = [line for line in out.splitlines() if line]
    assert lines == ["Total revenue | 1,000 | 2,000", "Net loss | $(500)", "Margin | 12.5%"]


def test_html_to_text_strips_markdown_from_headings_and_lists() -> None:
    out = html_to_text(
        "<p>1. Business</p><p>- 3 shares</p><p>+ 5</p>"
        "<h2>Item 7</h2><ul><li>first</li></ul><hr/>"
    )
    lines = [line for line in out.splitlines() if line]
    assert lines == ["1. Business", "- 3 shares", "+ 5", "Item 7", "first"]


def test_strip_markdown() -> None:
    text = "  ## Item 1\\. Business  \n  * risk\n* * *\na| b|\n---|---\n"
    assert strip_markdown(text) == "Item 1. Business\nrisk\n\na | b\n\n"


def test_normalize_handles_crlf_preformatted_text() -> None:
    raw = b"<pre>Annual report\r\n\r\n12\r\n\r\n\r\n\r\nNext</pre>"
    out = normalize(raw, META)
    assert out[len(render_header(META)):] == "Annual report\n\nNext"


def test_decode_html_falls_back_to_latin1() -> None:
    assert decode_html("café".encode("utf-8")) == "café"
    assert decode_html("café".encode("latin-1")) == "café"


def test_replace_nbsp() -> None:
    assert replace_nbsp("Total\u00a0assets\u00a0") == "Total assets "


def test_strip_schema_lines() -> None:
    text = "keep\nhttp://fasb.org/us-gaap/2023\n  xbrli:shares\nxmlns:dei=x\nhttps://a.b\nsee http://x"
    assert strip_schema_lines(text) == "keep\n\n\n\n\nsee http://x"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$ 1,000", "$1,000"),
        ("(  500)", "(500)"),
        ("( 12 )", "(12)"),
        ("- 3", "-3"),
        ("$\n\n42", "$42"),
        ("net (loss\n)", "net (loss)"),
    ],
)
def test_fix_drifted_symbols(raw: str, expected: str) -> None:
    assert fix_drifted_symbols(raw) == expected


def test_schema_and_page_lines_after_unicode_indent() -> None:
    assert strip_schema_lines("\u2003xbrli:pure\nbody") == "\nbody"
    assert strip_page_numbers("\u2003Page 4\u2003\nbody") == "\nbody"
    assert clean_text("\u2003xbrli:pure\n\u2003 12\nbody") == "body"


def test_blank_whitespace_lines() -> None:
    assert blank_whitespace_lines("a\n  \t \nb\n \n") == "a\n\nb\n\n"


def test_strip_page_numbers() -> None:
    text = "text\n12\n  Page 3  \npage 4\nPage3x\n2024 results"
    assert strip_page_numbers(text) == "text\n\n\n\nPage3x\n2024 results"


def test_collapse_blank_lines() -> None:
    assert collapse_blank_lines("a\n\n\n\nb") == "a\n\nb"
    assert collapse_blank_lines("a\n\n\nb\n\nc") == "a\n\nb\n\nc"


def test_trim() -> None:
    assert trim("\n\n  body \n") == "body"


SAMPLES = [
    "Revenue $ 1,000\n\n\n\n12\n\nNet loss (  500 )",
    "  https://xbrl.sec.gov/dei/2023\nbody text",
    "Item 1 - Business\n \t\nPage 2\n\n\n\n\nmore",
    "( \n 3 \n)\n  \nxbrli:pure\nend",
    "$\n\n\n\n42\n\n   \n\nPage 7",
    "\n\n\nplain paragraph\n\nanother\n",
    "\u2003xbrli:pure\nbody",
    "\u2003 12\u2003\nbody",
]


@pytest.mark.parametrize("text", SAMPLES)
def test_clean_text_is_idempotent(text: str) -> None:
    once = clean_text(text)
    assert clean_text(once) == once


@pytest.mark.parametrize("text", SAMPLES)
def test_each_text_stage_is_stable_on_cleaned_output(text: str) -> None:
    once = clean_text(text)
    for name, stage in STAGES[1:]:
        assert stage(once) == once, name


def test_render_header() -> None:
    assert render_header(META) == (
        "--- METADATA ---\n"
        "COMPANY: ACME\n"
        "CIK: 0000123456\n"
        "FORM: 10-K\n"
        "DATE: 2024-02-01\n"
        "----------------\n"
        "\n"
    )


def test_normalize_end_to_end() -> None:
    raw = (
        b"<html><body>"
        b"<p>Revenue was $ 1,000</p>"
        b"<p>12</p>"
        b"<p>Net loss ( 500 )</p>"
        b"</body></html>"
    )
    out = normalize(raw, META)
    header = render_header(META)
    assert out.startswith(header)
    assert out[len(header):] == "Revenue was $1,000\n\nNet loss (500)"
