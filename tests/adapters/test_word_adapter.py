from __future__ import annotations

import pytest

from cvpipeline.adapters import WordAdapter
from cvpipeline.errors import ExtractionError

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_can_handle_docx_only() -> None:
    adapter = WordAdapter()

    assert adapter.can_handle(b"", DOCX_MIME, "cv")
    assert adapter.can_handle(b"", "application/octet-stream", "cv.docx")
    assert not adapter.can_handle(b"", "application/msword", "cv.doc")


def test_extract_paragraphs_and_tables(resume_docx: bytes) -> None:
    result = WordAdapter().extract(resume_docx, DOCX_MIME, "cv.docx")

    lines = result.text.split("\n")
    assert lines[0] == "Adam Pritchard"
    assert "Director at Door 10, 2020-present" in lines
    assert lines[-1] == "Skills | Lobbying, briefing"
    assert result.metadata["tables"] == 1
    assert result.metadata["table_rows"] == 1
    assert result.adapter_name == "docx"


def test_extract_corrupt_file_raises() -> None:
    with pytest.raises(ExtractionError) as exc:
        WordAdapter().extract(b"not a zip archive", DOCX_MIME, "cv.docx")

    assert exc.value.adapter_name == "docx"
    assert exc.value.message
