from __future__ import annotations

import io

import docx
import pymupdf
import pytest
import structlog


def build_pdf(lines: list[str]) -> bytes:
    document = pymupdf.open()
    page = document.new_page()
    y = 72
    for line in lines:
        page.insert_text((72, y), line, fontsize=11)
        y += 16
    data = document.tobytes()
    document.close()
    return data


def build_docx(paragraphs: list[str], table: list[list[str]] | None = None) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                grid.cell(r, c).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def resume_lines() -> list[str]:
    return [
        "Adam Pritchard",
        "adam@door10.co.uk",
        "+44 20 7123 4567",
        "Director at Door 10, 2020-present",
        "Worked on public affairs and policy campaigns for clients.",
    ]


@pytest.fixture
def resume_pdf(resume_lines: list[str]) -> bytes:
    return build_pdf(resume_lines)


@pytest.fixture
def resume_docx(resume_lines: list[str]) -> bytes:
    return build_docx(resume_lines, table=[["Skills", "Lobbying, briefing"]])


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    # The CLI binds log output to the stream active at configure time.
    structlog.reset_defaults()
