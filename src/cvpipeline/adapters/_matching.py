"""MIME type and filename checks shared by adapters."""

from __future__ import annotations

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
TEXT_MIME = "text/plain"
IMAGE_MIMES = frozenset({"image/png", "image/jpeg", "image/tiff"})


def normalize_mime(mime_type: str | None) -> str:
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def has_extension(filename: str | None, *extensions: str) -> bool:
    if not filename:
        return False
    return filename.lower().endswith(extensions)


def file_extension(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def is_pdf(mime_type: str | None, filename: str | None) -> bool:
    return normalize_mime(mime_type) == PDF_MIME or has_extension(filename, ".pdf")
