"""Plain text adapter."""

from __future__ import annotations

from ..core.normalizer import build_result
from ..errors import ExtractionError
from ..schemas import ExtractionResult
from ._matching import TEXT_MIME, has_extension, normalize_mime


class PlainTextAdapter:
    name = "text"
    priority = 1

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        return normalize_mime(mime_type) == TEXT_MIME or has_extension(filename, ".txt")

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        if isinstance(buffer, str):
            return build_result(self.name, buffer, {"encoding": "utf-8"})
        try:
            text = bytes(buffer).decode("utf-8-sig", errors="replace")
        except TypeError as exc:
            raise ExtractionError(self.name, exc) from exc
        return build_result(self.name, text, {"encoding": "utf-8"})
