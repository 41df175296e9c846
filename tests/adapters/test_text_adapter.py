from __future__ import annotations

import pytest

from cvpipeline.adapters import ExtractionAdapter, PlainTextAdapter


def test_can_handle_by_mime_or_extension() -> None:
    adapter = PlainTextAdapter()

    assert isinstance(adapter, ExtractionAdapter)
    assert adapter.can_handle(b"", "text/plain", "cv")
    assert adapter.can_handle(b"", "text/plain; charset=utf-8", "cv")
    assert adapter.can_handle(b"", "application/octet-stream", "CV.TXT")
    assert not adapter.can_handle(b"", "application/pdf", "cv.pdf")


def test_extract_decodes_and_normalizes() -> None:
    adapter = PlainTextAdapter()
    raw = "﻿Jane Smith\r\n\r\n\r\njane@example.com  \n".encode("utf-8")

    result = adapter.extract(raw, "text/plain", "cv.txt")

    assert result.text == "Jane Smith\n\njane@example.com"
    assert result.adapter_name == "text"
    assert result.confidence == pytest.approx(0.1)
    assert result.metadata == {"encoding": "utf-8"}


def test_extract_replaces_invalid_bytes() -> None:
    result = PlainTextAdapter().extract(b"caf\xe9 owner " * 50, "text/plain", "cv.txt")

    assert "�" in result.text
    assert result.confidence == pytest.approx(0.6)
