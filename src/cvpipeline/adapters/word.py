"""Word document adapter."""

from __future__ import annotations

import io

import docx

from ..core.normalizer import build_result
from ..errors import ExtractionError
from ..schemas import ExtractionResult
from ._matching import DOCX_MIME, has_extension, normalize_mime


def docx_text(buffer: bytes) -> tuple[str, dict]:
    """Return paragraph text followed by table rows, one per line."""
    document = docx.Document(io.BytesIO(buffer))
    parts = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    table_rows = 0
    for table in document.tables:
        for row in table.rows:
            row_text = " | ".join(cell.text.strip() for cell in row.cells if cell.text.strip())
            if row_text:
                parts.append(row_text)
                table_rows += 1
    return "\n".join(parts), {
        "paragraphs": len(document.paragraphs),
        "tables": len(document.tables),
        "table_rows": table_rows,
    }


class WordAdapter:
    """Extract text from ``.docx`` files with python-docx."""

    name = "docx"
    priority = 1

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        return normalize_mime(mime_type) == DOCX_MIME or has_extension(filename, ".docx")

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        try:
            text, metadata = docx_text(buffer)
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(self.name, exc) from exc
        return build_result(self.name, text, metadata)
