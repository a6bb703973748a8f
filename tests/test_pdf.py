import pymupdf

from app.modules.study.pdf import (
    MAX_TEXT_CHARS,
    PLACEHOLDER_TEXT,
    UNREADABLE_TEXT,
    extract_pdf_text,
)


def _pdf(*pages: str) -> bytes:
    doc = pymupdf.open()
    for text in pages:
        page = doc.new_page()
        page.insert_textbox(pymupdf.Rect(36, 36, 560, 800), text, fontsize=6)
    data = doc.tobytes()
    doc.close()
    return data


def test_extracts_text_from_every_page():
    first = "The mitochondria is the powerhouse of the cell and produces ATP."
    second = "Ribosomes assemble proteins from amino acids."
    text = extract_pdf_text(_pdf(first, second), "cells.pdf")
    assert "powerhouse of the cell" in text
    assert "Ribosomes assemble proteins" in text
    assert "\n" not in text


def test_short_text_uses_placeholder():
    assert extract_pdf_text(_pdf("Hi"), "tiny.pdf") == PLACEHOLDER_TEXT.format(name="tiny.pdf")


def test_unreadable_bytes():
    assert extract_pdf_text(b"definitely not a pdf", "x.pdf") == UNREADABLE_TEXT


def test_long_text_is_truncated():
    pages = ["knowledge " * 300] * 8
    text = extract_pdf_text(_pdf(*pages), "long.pdf")
    assert text.endswith("...[content truncated]")
    assert len(text) == MAX_TEXT_CHARS + len("...[content truncated]")
