"""Last-resort adapter that sniffs the payload instead of trusting its label."""

from __future__ import annotations

import io
import zipfile

import pymupdf
import structlog

from ..core.normalizer import build_result
from ..errors import ExtractionError
from ..pdf_utils import extract_page_text
from ..schemas import ExtractionResult
from ._matching import file_extension
from .word import docx_text

_PDF_MAGIC = b"%PDF"
_ZIP_MAGIC = b"PK\x03\x04"
# Share of printable characters required before bytes are treated as text.
_TEXT_RATIO = 0.9


class UniversalFallbackAdapter:
    """Best-effort decoding of any payload, slow and tried last."""

    name = "universal"
    priority = 10

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        return True

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        if not buffer:
            raise ExtractionError(self.name, "Empty input")
        try:
            text, metadata = self._decode(bytes(buffer), filename)
        except ExtractionError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(self.name, exc) from exc
        return build_result(self.name, text, metadata)

    def _decode(self, buffer: bytes, filename: str) -> tuple[str, dict]:
        if buffer.startswith(_PDF_MAGIC):
            text, metadata = extract_page_text(buffer)
            return text, {**metadata, "detected": "pdf"}
        if buffer.startswith(_ZIP_MAGIC) and _is_word_package(buffer):
            text, metadata = docx_text(buffer)
            return text, {**metadata, "detected": "docx"}

        extension = file_extension(filename)
        if extension and extension not in {"txt", "text", "csv", "md"}:
            try:
                with pymupdf.open(stream=buffer, filetype=extension) as document:
                    text = "\n".join(page.get_text("text") for page in document)
                    return text, {"detected": extension, "pages": document.page_count}
            except Exception as exc:  # noqa: BLE001
                self._logger.debug("universal.container_failed", extension=extension, error=str(exc))

        decoded = _decode_text(buffer)
        if decoded is None:
            raise ExtractionError(self.name, f"Unrecognized binary content ({extension or 'no extension'})")
        return decoded, {"detected": "text"}


def _is_word_package(buffer: bytes) -> bool:
    try:
        with zipfile.ZipFile(io.BytesIO(buffer)) as archive:
            return "word/document.xml" in archive.namelist()
    except zipfile.BadZipFile:
        return False


def _decode_text(buffer: bytes) -> str | None:
    encodings = ["utf-8-sig"]
    if buffer.startswith((b"\xff\xfe", b"\xfe\xff")):
        encodings.append("utf-16")
    for encoding in encodings:
        try:
            text = buffer.decode(encoding)
        except UnicodeDecodeError:
            continue
        if _looks_printable(text):
            return text
    text = buffer.decode("latin-1")
    return text if _looks_printable(text) else None


def _looks_printable(text: str) -> bool:
    if not text:
        return False
    printable = sum(1 for ch in text if ch.isprintable() or ch in "\n\r\t")
    return printable / len(text) >= _TEXT_RATIO
