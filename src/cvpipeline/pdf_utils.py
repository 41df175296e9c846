"""Utilities for decoding PDF documents held in memory."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Sequence

import pymupdf
import pymupdf4llm
from PIL import Image

_MARKDOWN_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s*")
_MARKDOWN_EMPHASIS_RE = re.compile(r"(\*\*|__|\*|`)")
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_MARKDOWN_RULE_RE = re.compile(r"^\s*(?:-{3,}|\*{3,}|_{3,})\s*$")
_MARKDOWN_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+")
_TABLE_RULE_RE = re.compile(r"^\s*\|?(?:\s*:?-{3,}:?\s*\|)+\s*$")


def open_pdf(buffer: bytes) -> pymupdf.Document:
    """Open an in-memory PDF, raising ``ValueError`` for empty or encrypted input."""
    if not buffer:
        raise ValueError("Empty PDF buffer")
    document = pymupdf.open(stream=buffer, filetype="pdf")
    if document.needs_pass and not document.authenticate(""):
        document.close()
        raise ValueError("PDF is password protected")
    if document.page_count == 0:
        document.close()
        raise ValueError("PDF has no pages")
    return document


def extract_page_text(buffer: bytes) -> tuple[str, dict]:
    """Return plain text of every page joined by newlines, plus document metadata."""
    with open_pdf(buffer) as document:
        pages = [page.get_text("text") for page in document]
        metadata = {
            "pages": document.page_count,
            "info": {k: v for k, v in (document.metadata or {}).items() if v},
        }
    return "\n".join(pages), metadata


def extract_markdown(
    buffer: bytes,
    *,
    exclude_patterns: Sequence[str] | None = None,
) -> tuple[str, dict]:
    """Return layout-aware markdown for the PDF, removing boilerplate lines.

    Parameters
    ----------
    buffer:
        Raw PDF bytes.
    exclude_patterns:
        Optional list of string patterns to remove entirely from the output lines.
        Each pattern is matched as a substring (case-sensitive), optionally
        followed by a page counter such as ``1 / 3``.
    """
    with open_pdf(buffer) as document:
        markdown = pymupdf4llm.to_markdown(document, show_progress=False)
        metadata = {"pages": document.page_count}

    patterns = _build_patterns(exclude_patterns or ())
    cleaned_lines: list[str] = []
    for line in markdown.splitlines():
        if not line.strip():
            cleaned_lines.append(line)
            continue
        if any(pattern.search(line) for pattern in patterns):
            continue
        cleaned_lines.append(line)
    return "\n".join(cleaned_lines), metadata


def strip_markdown(markdown: str) -> str:
    """Drop markdown markup so line-based heuristics see plain text."""
    lines: list[str] = []
    for line in markdown.splitlines():
        if _MARKDOWN_RULE_RE.match(line) or _TABLE_RULE_RE.match(line):
            continue
        line = _MARKDOWN_HEADING_RE.sub("", line)
        line = _MARKDOWN_BULLET_RE.sub(r"\1", line)
        line = _MARKDOWN_LINK_RE.sub(r"\1", line)
        line = _MARKDOWN_EMPHASIS_RE.sub("", line)
        if line.strip().startswith("|"):
            line = " ".join(cell.strip() for cell in line.strip().strip("|").split("|"))
        lines.append(line)
    return "\n".join(lines)


def render_pages(buffer: bytes, *, dpi: int = 300) -> Iterator[Image.Image]:
    """Yield one RGB image per PDF page for OCR."""
    with open_pdf(buffer) as document:
        for page in document:
            pixmap = page.get_pixmap(dpi=dpi, alpha=False)
            yield Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)


def _build_patterns(excludes: Iterable[str]) -> list[re.Pattern[str]]:
    patterns: list[re.Pattern[str]] = []
    for text in excludes:
        escaped = re.escape(text)
        # Allow optional whitespace and page counter suffix like " 1 / 63".
        pattern = re.compile(rf"{escaped}(?:\s+\d+\s*/\s*\d+)?")
        patterns.append(pattern)
    return patterns


__all__ = [
    "open_pdf",
    "extract_page_text",
    "extract_markdown",
    "strip_markdown",
    "render_pages",
]
