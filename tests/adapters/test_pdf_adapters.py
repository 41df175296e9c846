from __future__ import annotations

import pytest

import cvpipeline.pdf_utils as pdf_utils
from cvpipeline.adapters import PdfLayoutAdapter, PdfTextAdapter
from cvpipeline.errors import ExtractionError


@pytest.mark.parametrize("adapter_cls", [PdfTextAdapter, PdfLayoutAdapter])
def test_can_handle_pdf(adapter_cls) -> None:
    adapter = adapter_cls()

    assert adapter.priority == 1
    assert adapter.can_handle(b"", "application/pdf", "scan")
    assert adapter.can_handle(b"", "", "Resume.PDF")
    assert not adapter.can_handle(b"", "text/plain", "cv.txt")


def test_pdf_text_extracts_text_layer(resume_pdf: bytes) -> None:
    result = PdfTextAdapter().extract(resume_pdf, "application/pdf", "cv.pdf")

    lines = result.text.split("\n")
    assert lines[0] == "Adam Pritchard"
    assert "adam@door10.co.uk" in lines
    assert result.metadata["pages"] == 1
    assert result.adapter_name == "pdf-text"


@pytest.mark.parametrize("adapter_cls", [PdfTextAdapter, PdfLayoutAdapter])
def test_corrupt_pdf_raises_extraction_error(adapter_cls) -> None:
    adapter = adapter_cls()

    with pytest.raises(ExtractionError) as exc:
        adapter.extract(b"%PDF-1.4 truncated garbage", "application/pdf", "cv.pdf")
    assert exc.value.adapter_name == adapter.name


def test_empty_pdf_buffer_raises() -> None:
    with pytest.raises(ExtractionError, match="Empty PDF buffer"):
        PdfTextAdapter().extract(b"", "application/pdf", "cv.pdf")


def test_pdf_layout_strips_markdown(monkeypatch: pytest.MonkeyPatch, resume_pdf: bytes) -> None:
    markdown = (
        "# **Adam Pritchard**\n"
        "\n"
        "- adam@door10.co.uk\n"
        "| Role | Years |\n"
        "|---|---|\n"
        "| Director | 2020 |\n"
        "Confidential - do not forward 1 / 2\n"
        "See [portfolio](https://example.com)\n"
    )
    monkeypatch.setattr(pdf_utils.pymupdf4llm, "to_markdown", lambda doc, **_: markdown)

    adapter = PdfLayoutAdapter(exclude_patterns=["Confidential - do not forward"])
    result = adapter.extract(resume_pdf, "application/pdf", "cv.pdf")

    assert result.text.split("\n") == [
        "Adam Pritchard",
        "",
        "adam@door10.co.uk",
        "Role Years",
        "Director 2020",
        "See portfolio",
    ]
    assert result.metadata["format"] == "markdown"
