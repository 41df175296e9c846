"""PDF text adapters backed by PyMuPDF."""

from __future__ import annotations

from typing import Sequence

from ..core.normalizer import build_result
from ..errors import ExtractionError
from ..pdf_utils import extract_markdown, extract_page_text, strip_markdown
from ..schemas import ExtractionResult
from ._matching import is_pdf


class PdfTextAdapter:
    """Read the embedded text layer page by page."""

    name = "pdf-text"
    priority = 1

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        return is_pdf(mime_type, filename)

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        try:
            text, metadata = extract_page_text(buffer)
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(self.name, exc) from exc
        return build_result(self.name, text, metadata)


class PdfLayoutAdapter:
    """Second PDF decoder using layout-aware markdown conversion.

    Recovers reading order on multi-column layouts where the raw text layer
    interleaves columns.
    """

    name = "pdf-layout"
    priority = 1

    def __init__(self, *, exclude_patterns: Sequence[str] | None = None) -> None:
        self._exclude_patterns = tuple(exclude_patterns or ())

    @property
    def exclude_patterns(self) -> tuple[str, ...]:
        return self._exclude_patterns

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        return is_pdf(mime_type, filename)

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        try:
            markdown, metadata = extract_markdown(
                buffer, exclude_patterns=self._exclude_patterns
            )
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(self.name, exc) from exc
        metadata["format"] = "markdown"
        return build_result(self.name, strip_markdown(markdown), metadata)
