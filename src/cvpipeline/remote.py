"""Client for the remote CV parsing service used as a first-pass delegate."""

from __future__ import annotations

from typing import Any

import requests
import structlog

from .adapters._matching import DOC_MIME, DOCX_MIME, PDF_MIME, normalize_mime
from .core.normalizer import build_result
from .errors import RemoteDelegationError
from .schemas import ExtractionResult

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset({PDF_MIME, DOCX_MIME, DOC_MIME})

_PARSE_PATH = "/api/documentparser/parse"
_HEALTH_PATH = "/api/documentparser/health"
_FORMATS_PATH = "/api/documentparser/supported-formats"

_STATUS_MESSAGES = {
    413: "File too large for CV parsing service",
    415: "Unsupported file type for CV parsing service",
}


def supports(mime_type: str | None) -> bool:
    return normalize_mime(mime_type) in SUPPORTED_MIME_TYPES


class RemoteParserClient:
    """HTTP client for the document parser API."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_upload_bytes: int = 10 * 1024 * 1024,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_upload_bytes = max_upload_bytes
        self._session = session or requests.Session()
        self._logger = structlog.get_logger(__name__)

    @property
    def base_url(self) -> str:
        return self._base_url

    def supports(self, mime_type: str | None) -> bool:
        return supports(mime_type)

    def parse(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        if len(buffer) > self._max_upload_bytes:
            raise RemoteDelegationError(_STATUS_MESSAGES[413])

        files = {"file": (filename or "upload", buffer, normalize_mime(mime_type))}
        try:
            response = self._session.post(
                f"{self._base_url}{_PARSE_PATH}",
                files=files,
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            raise RemoteDelegationError("CV parsing request timed out") from exc
        except requests.ConnectionError as exc:
            raise RemoteDelegationError("CV parsing service is unavailable") from exc

        if response.status_code in _STATUS_MESSAGES:
            raise RemoteDelegationError(_STATUS_MESSAGES[response.status_code])
        try:
            response.raise_for_status()
            body = response.json()
        except (requests.HTTPError, ValueError) as exc:
            raise RemoteDelegationError(exc) from exc

        if not isinstance(body, dict) or not _pick(body, "success", "Success"):
            message = _pick(body, "message", "Message") if isinstance(body, dict) else None
            raise RemoteDelegationError(message or "CV parsing failed")

        data = _pick(body, "data", "Data") or {}
        self._logger.debug("remote.response", filename=filename, keys=sorted(data))
        candidate = normalize_remote_candidate(data)
        return build_result(
            self.name,
            render_candidate_text(candidate),
            {
                "source": "remote",
                "original_filename": filename,
                "document_type": mime_type,
                "parsed_at": _pick(data, "parsedAt", "ParsedAt"),
                "remote_candidate": candidate,
            },
        )

    def health(self) -> bool:
        try:
            response = self._session.get(f"{self._base_url}{_HEALTH_PATH}", timeout=5)
            response.raise_for_status()
            return _pick(response.json(), "Status", "status") == "Healthy"
        except (requests.RequestException, ValueError) as exc:
            self._logger.warning("remote.health_failed", error=str(exc))
            return False

    def supported_formats(self) -> list[str]:
        try:
            response = self._session.get(f"{self._base_url}{_FORMATS_PATH}", timeout=5)
            response.raise_for_status()
            formats = _pick(response.json(), "SupportedFormats", "supportedFormats") or []
        except (requests.RequestException, ValueError) as exc:
            self._logger.warning("remote.formats_failed", error=str(exc))
            return []
        flattened: list[str] = []
        for item in formats:
            if isinstance(item, (list, tuple)):
                flattened.extend(str(ext) for ext in item)
            else:
                flattened.append(str(item))
        return flattened


def normalize_remote_candidate(data: dict[str, Any]) -> dict[str, Any]:
    """Map the service payload (camelCase or PascalCase keys) to plain fields."""
    personal = _pick(data, "personalInfo", "PersonalInfo") or {}
    first_name = _pick(personal, "firstName", "FirstName") or ""
    last_name = _pick(personal, "lastName", "LastName") or ""
    roles = []
    for role in _pick(data, "workExperience", "WorkExperience") or []:
        roles.append(
            {
                "employer": _pick(role, "company", "Company") or "",
                "title": _pick(role, "jobTitle", "JobTitle") or "",
                "start_date": _pick(role, "startDate", "StartDate") or "",
                "end_date": _pick(role, "endDate", "EndDate") or "",
                "description": _pick(role, "description", "Description") or "",
            }
        )
    return {
        "name": _pick(personal, "name", "Name") or f"{first_name} {last_name}".strip(),
        "first_name": first_name,
        "last_name": last_name,
        "email": _pick(personal, "email", "Email") or "",
        "phone": _pick(personal, "phone", "Phone") or "",
        "experience": roles,
        "skills": list(_pick(data, "skills", "Skills") or []),
        "languages": list(_pick(data, "languages", "Languages") or []),
        "certifications": list(_pick(data, "certifications", "Certifications") or []),
        "summary": _pick(data, "summary", "Summary") or "",
    }


def render_candidate_text(candidate: dict[str, Any]) -> str:
    """Render structured service output back into CV-shaped text.

    The layout (name first, then contact lines, one ``Title — Company (start–end)``
    line per role) is what the local field heuristics expect.
    """
    lines = [candidate["name"], candidate["email"], candidate["phone"]]
    for role in candidate["experience"]:
        if not (role["title"] and role["employer"]):
            continue
        start = _year(role["start_date"])
        end = _year(role["end_date"]) or "present"
        period = f" ({start}–{end})" if start else ""
        lines.append(f"{role['title']} — {role['employer']}{period}")
        if role["description"]:
            lines.append(role["description"])
    lines.append(candidate["summary"])
    if candidate["skills"]:
        lines.append("Skills: " + ", ".join(candidate["skills"]))
    if candidate["languages"]:
        lines.append("Languages: " + ", ".join(candidate["languages"]))
    if candidate["certifications"]:
        lines.append("Certifications: " + ", ".join(candidate["certifications"]))
    return "\n".join(line for line in lines if line)


def _year(value: str) -> str:
    """Leading year of an ISO-ish date; words such as ``Present`` yield ``""``."""
    value = str(value).strip()
    return value[:4] if value[:4].isdigit() else ""


def _pick(mapping: Any, *keys: str) -> Any:
    if not isinstance(mapping, dict):
        return None
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


__all__ = ["RemoteParserClient", "SUPPORTED_MIME_TYPES", "supports"]
