"""Parse pipeline assembly and execution."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Protocol

import pendulum
import structlog

from . import __version__
from .adapters import (
    ExtractionAdapter,
    OcrAdapter,
    PdfLayoutAdapter,
    PdfTextAdapter,
    PlainTextAdapter,
    UniversalFallbackAdapter,
    WordAdapter,
)
from .core.fields import CandidateFieldExtractor
from .core.selector import select_best_result
from .errors import ExtractionError
from .schemas import AdapterAttemptError, ExtractionResult, ParseOutcome


class RemoteParser(Protocol):
    """Remote delegate contract (see :class:`cvpipeline.remote.RemoteParserClient`)."""

    name: str

    def supports(self, mime_type: str | None) -> bool: ...

    def parse(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult: ...


class AdapterRegistry:
    """Adapters kept in ascending priority order; ties keep registration order."""

    def __init__(self, adapters: Iterable[ExtractionAdapter]):
        self._adapters = tuple(sorted(adapters, key=lambda adapter: adapter.priority))

    def ordered(self) -> tuple[ExtractionAdapter, ...]:
        return self._adapters

    def get(self, name: str) -> ExtractionAdapter:
        for adapter in self._adapters:
            if adapter.name == name:
                return adapter
        raise KeyError(f"Unknown adapter: {name!r}")

    def names(self) -> List[str]:
        return [adapter.name for adapter in self._adapters]

    def __len__(self) -> int:
        return len(self._adapters)


class AllAdaptersFailedError(RuntimeError):
    """Raised when no attempt, remote or local, produced a result."""

    def __init__(self, errors: list[AdapterAttemptError]):
        self.errors = list(errors)
        detail = ", ".join(f"{err.adapter_name}: {err.message}" for err in self.errors)
        super().__init__(f"All parsing methods failed. Errors: {detail or 'no applicable adapter'}")


@dataclass(frozen=True)
class PipelineThresholds:
    """Short-circuit rules for remote delegation and the local adapter chain."""

    remote_accept_confidence: float = 0.6
    early_stop_confidence: float = 0.7
    early_stop_min_length: int = 500


class ParsePipeline:
    """Remote delegation, prioritized adapters, best-result selection, field extraction.

    Each :meth:`parse` call keeps its results and errors local, so one pipeline
    may serve concurrent calls.
    """

    def __init__(
        self,
        *,
        registry: AdapterRegistry,
        remote_client: RemoteParser | None = None,
        thresholds: PipelineThresholds | None = None,
        field_extractor: CandidateFieldExtractor | None = None,
    ) -> None:
        self._registry = registry
        self._remote = remote_client
        self._thresholds = thresholds or PipelineThresholds()
        self._fields = field_extractor or CandidateFieldExtractor()
        self._logger = structlog.get_logger(__name__)

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    def parse(self, buffer: bytes, mime_type: str, filename: str) -> ParseOutcome:
        logger = self._logger.bind(filename=filename, mime_type=mime_type)
        logger.info("parse.start", size=len(buffer))

        results: list[ExtractionResult] = []
        errors: list[AdapterAttemptError] = []

        delegated = self._delegate(buffer, mime_type, filename, results, errors, logger)
        if delegated is not None:
            return self._finish(delegated, results, errors, logger, delegated=True)

        self._probe(buffer, mime_type, filename, results, errors, logger)

        if not results:
            failure = AllAdaptersFailedError(errors)
            logger.error("parse.failed", errors=[err.model_dump() for err in errors])
            raise failure

        best = select_best_result(_candidates(results))
        return self._finish(best, results, errors, logger)

    def _delegate(self, buffer, mime_type, filename, results, errors, logger) -> ExtractionResult | None:
        if self._remote is None:
            return None
        if not self._remote.supports(mime_type):
            logger.debug("remote.skipped", reason="unsupported_mime_type")
            return None

        started = time.perf_counter()
        try:
            result = self._remote.parse(buffer, mime_type, filename)
        except Exception as exc:  # noqa: BLE001
            errors.append(_attempt_error(self._remote.name, exc))
            logger.warning("remote.failed", error=str(exc))
            return None

        result = _stamp(result, self._remote.name, started)
        results.append(result)
        logger.info(
            "remote.succeeded",
            confidence=result.confidence,
            chars=len(result.text),
            duration_ms=result.duration_ms,
        )
        if result.confidence > self._thresholds.remote_accept_confidence:
            return result
        return None

    def _probe(self, buffer, mime_type, filename, results, errors, logger) -> None:
        for adapter in self._registry.ordered():
            if not adapter.can_handle(buffer, mime_type, filename):
                continue
            logger.debug("adapter.trying", adapter=adapter.name)
            started = time.perf_counter()
            try:
                result = adapter.extract(buffer, mime_type, filename)
            except Exception as exc:  # noqa: BLE001
                errors.append(_attempt_error(adapter.name, exc))
                logger.debug("adapter.failed", adapter=adapter.name, error=str(exc))
                continue

            result = _stamp(result, adapter.name, started)
            results.append(result)
            logger.info(
                "adapter.succeeded",
                adapter=adapter.name,
                chars=len(result.text),
                confidence=result.confidence,
                duration_ms=result.duration_ms,
            )
            if self._good_enough(result):
                logger.info("adapter.early_stop", adapter=adapter.name)
                break

    def _good_enough(self, result: ExtractionResult) -> bool:
        return (
            result.confidence > self._thresholds.early_stop_confidence
            and len(result.text) > self._thresholds.early_stop_min_length
        )

    def _finish(self, best, results, errors, logger, *, delegated: bool = False) -> ParseOutcome:
        candidate = self._fields.extract(best.text)
        logger.info(
            "parse.selected",
            adapter=best.adapter_name,
            confidence=best.confidence,
            candidate_confidence=candidate.confidence,
            delegated=delegated,
        )
        return ParseOutcome(
            result=best,
            candidate=candidate,
            all_results=list(results),
            errors=list(errors),
            delegated=delegated,
        )


def _candidates(results: list[ExtractionResult]) -> list[ExtractionResult]:
    """Results eligible for selection: empty texts only when nothing else exists."""
    non_empty = [result for result in results if result.text]
    return non_empty or results


def _stamp(result: ExtractionResult, name: str, started: float) -> ExtractionResult:
    duration_ms = int((time.perf_counter() - started) * 1000)
    return result.model_copy(update={"adapter_name": name, "duration_ms": duration_ms})


def _attempt_error(name: str, exc: BaseException) -> AdapterAttemptError:
    message = exc.message if isinstance(exc, ExtractionError) else str(exc)
    return AdapterAttemptError(adapter_name=name, message=message or type(exc).__name__)


def default_registry(*, ocr_enabled: bool = False) -> AdapterRegistry:
    """Return the default adapter registry."""
    return AdapterRegistry(
        adapters=[
            PdfTextAdapter(),
            PdfLayoutAdapter(),
            WordAdapter(),
            PlainTextAdapter(),
            OcrAdapter(enabled=ocr_enabled),
            UniversalFallbackAdapter(),
        ]
    )


class OutputWriter:
    """Persist parse payloads."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


def build_payload(outcome: ParseOutcome, *, filename: str) -> dict:
    """Caller-facing payload plus run metadata."""
    payload = outcome.to_payload()
    payload["parseMetadata"] = {
        "filename": filename,
        "delegated": outcome.delegated,
        "parsedAt": pendulum.now("UTC").to_iso8601_string(),
        "appVersion": __version__,
    }
    return payload


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")

    def record_outcome(self, filename: str, outcome: ParseOutcome) -> None:
        self.append(
            {
                "filename": filename,
                "status": "ok",
                "adapter": outcome.result.adapter_name,
                "confidence": outcome.result.confidence,
                "candidate_confidence": outcome.candidate.confidence,
                "attempts": [r.adapter_name for r in outcome.all_results],
                "errors": [e.model_dump() for e in outcome.errors],
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
            }
        )

    def record_failure(self, filename: str, failure: AllAdaptersFailedError) -> None:
        self.append(
            {
                "filename": filename,
                "status": "failed",
                "errors": [e.model_dump() for e in failure.errors],
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
            }
        )
