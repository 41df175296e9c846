"""OCR adapter for scanned PDFs and images."""

from __future__ import annotations

import io
from typing import Iterable

import pytesseract
import structlog
from PIL import Image

from ..core.normalizer import build_result
from ..errors import ExtractionError
from ..pdf_utils import render_pages
from ..schemas import ExtractionResult
from ._matching import IMAGE_MIMES, has_extension, is_pdf, normalize_mime

_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tif", ".tiff")


class OcrAdapter:
    """Recognize text with Tesseract. Disabled unless ``enabled`` is set."""

    name = "tesseract-ocr"
    priority = 2

    def __init__(
        self,
        *,
        enabled: bool = False,
        language: str = "eng",
        dpi: int = 300,
        timeout_seconds: float = 0,
    ) -> None:
        self._enabled = enabled
        self._language = language
        self._dpi = dpi
        self._timeout = timeout_seconds
        self._logger = structlog.get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        if not self._enabled:
            return False
        return self._is_image(mime_type, filename) or is_pdf(mime_type, filename)

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        self._logger.info("ocr.start", filename=filename, language=self._language)
        try:
            if self._is_image(mime_type, filename):
                images: Iterable[Image.Image] = [Image.open(io.BytesIO(buffer))]
            else:
                images = render_pages(buffer, dpi=self._dpi)
            texts: list[str] = []
            for index, image in enumerate(images, start=1):
                text = pytesseract.image_to_string(
                    image, lang=self._language, timeout=self._timeout
                )
                self._logger.debug("ocr.page", page=index, chars=len(text))
                if text:
                    texts.append(text)
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(self.name, exc) from exc
        return build_result(
            self.name,
            "\n\n".join(texts),
            {"method": "ocr", "language": self._language, "pages": len(texts)},
        )

    @staticmethod
    def _is_image(mime_type: str, filename: str) -> bool:
        return normalize_mime(mime_type) in IMAGE_MIMES or has_extension(
            filename, *_IMAGE_EXTENSIONS
        )
