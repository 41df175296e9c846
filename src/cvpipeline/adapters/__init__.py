"""Format-specific text extraction adapters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import ExtractionResult
from .word import WordAdapter
from .fallback import UniversalFallbackAdapter
from .ocr import OcrAdapter
from .pdf import PdfLayoutAdapter, PdfTextAdapter
from .text import PlainTextAdapter


@runtime_checkable
class ExtractionAdapter(Protocol):
    """Text extraction strategy contract.

    ``can_handle`` is a cheap inspection of type, filename and feature flags and
    must not decode anything. ``extract`` raises
    :class:`~cvpipeline.errors.ExtractionError` when its decoder fails; poor
    output is reported through a low confidence instead.
    """

    name: str
    priority: int

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        """Return True when the adapter should attempt this input."""

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        """Decode the input and return normalized text with its confidence."""


__all__ = [
    "ExtractionAdapter",
    "PdfTextAdapter",
    "PdfLayoutAdapter",
    "WordAdapter",
    "PlainTextAdapter",
    "OcrAdapter",
    "UniversalFallbackAdapter",
]
