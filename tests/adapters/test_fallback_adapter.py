from __future__ import annotations

import pytest

from cvpipeline.adapters import UniversalFallbackAdapter
from cvpipeline.errors import ExtractionError


def test_always_handles() -> None:
    adapter = UniversalFallbackAdapter()

    assert adapter.priority == 10
    assert adapter.can_handle(b"", "", "")
    assert adapter.can_handle(b"\x00", "application/x-unknown", "file.xyz")


def test_sniffs_mislabelled_pdf(resume_pdf: bytes) -> None:
    result = UniversalFallbackAdapter().extract(resume_pdf, "application/octet-stream", "upload.bin")

    assert result.metadata["detected"] == "pdf"
    assert result.text.startswith("Adam Pritchard")


def test_sniffs_mislabelled_docx(resume_docx: bytes) -> None:
    result = UniversalFallbackAdapter().extract(resume_docx, "application/msword", "cv.doc")

    assert result.metadata["detected"] == "docx"
    assert result.text.startswith("Adam Pritchard")


def test_decodes_plain_text_without_extension() -> None:
    result = UniversalFallbackAdapter().extract(
        "Zoë Brown\nCampaigns lead".encode("utf-8"), "", "cv"
    )

    assert result.metadata == {"detected": "text"}
    assert result.text == "Zoë Brown\nCampaigns lead"


def test_rejects_binary_noise() -> None:
    with pytest.raises(ExtractionError, match="Unrecognized binary content"):
        UniversalFallbackAdapter().extract(bytes(range(256)) * 4, "", "blob")


def test_rejects_empty_input() -> None:
    with pytest.raises(ExtractionError):
        UniversalFallbackAdapter().extract(b"", "text/plain", "cv.txt")
