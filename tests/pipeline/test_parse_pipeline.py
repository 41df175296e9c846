from __future__ import annotations

import json
import time
from pathlib import Path

import pytest

from cvpipeline.adapters import ExtractionAdapter, PlainTextAdapter
from cvpipeline.core.normalizer import build_result
from cvpipeline.errors import ExtractionError, RemoteDelegationError
from cvpipeline.pipeline import (
    AdapterRegistry,
    AllAdaptersFailedError,
    AuditLogger,
    ParsePipeline,
    PipelineThresholds,
    build_payload,
    default_registry,
)
from cvpipeline.schemas import ExtractionResult


class FakeAdapter:
    def __init__(
        self,
        name: str,
        priority: int,
        *,
        text: str = "",
        error: Exception | None = None,
        handles: bool = True,
    ) -> None:
        self.name = name
        self.priority = priority
        self._text = text
        self._error = error
        self._handles = handles
        self.calls = 0

    def can_handle(self, buffer: bytes, mime_type: str, filename: str) -> bool:
        return self._handles

    def extract(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return build_result(self.name, self._text)


class FakeRemote:
    name = "remote"

    def __init__(self, *, text: str = "", error: Exception | None = None, mime_types=("application/pdf",)):
        self._text = text
        self._error = error
        self._mime_types = mime_types
        self.calls = 0

    def supports(self, mime_type: str | None) -> bool:
        return mime_type in self._mime_types

    def parse(self, buffer: bytes, mime_type: str, filename: str) -> ExtractionResult:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return build_result(self.name, self._text, {"source": "remote"})


def test_fake_adapter_satisfies_protocol() -> None:
    assert isinstance(FakeAdapter("a", 1), ExtractionAdapter)


def test_registry_orders_by_priority_keeping_registration_order() -> None:
    registry = AdapterRegistry(
        [FakeAdapter("late", 10), FakeAdapter("first", 1), FakeAdapter("second", 1), FakeAdapter("mid", 2)]
    )

    assert registry.names() == ["first", "second", "mid", "late"]
    assert registry.get("mid").priority == 2
    with pytest.raises(KeyError):
        registry.get("missing")


def test_default_registry_order() -> None:
    assert default_registry().names() == [
        "pdf-text",
        "pdf-layout",
        "docx",
        "text",
        "tesseract-ocr",
        "universal",
    ]


def test_early_stop_skips_remaining_adapters() -> None:
    first = FakeAdapter("first", 1, text="a" * 2500)
    second = FakeAdapter("second", 2, text="b" * 50)
    third = FakeAdapter("third", 3, text="c" * 50)
    pipeline = ParsePipeline(registry=AdapterRegistry([first, second, third]))

    outcome = pipeline.parse(b"data", "text/plain", "cv.txt")

    assert outcome.result.adapter_name == "first"
    assert outcome.result.confidence == pytest.approx(0.9)
    assert second.calls == 0 and third.calls == 0
    assert [r.adapter_name for r in outcome.all_results] == ["first"]


def test_no_early_stop_for_short_confident_text() -> None:
    first = FakeAdapter("first", 1, text="a" * 450)
    second = FakeAdapter("second", 2, text="b" * 1200)
    pipeline = ParsePipeline(
        registry=AdapterRegistry([first, second]),
        thresholds=PipelineThresholds(early_stop_confidence=0.2, early_stop_min_length=500),
    )

    outcome = pipeline.parse(b"data", "text/plain", "cv.txt")

    assert second.calls == 1
    assert outcome.result.adapter_name == "second"


def test_all_failures_are_aggregated() -> None:
    adapters = [
        FakeAdapter("one", 1, error=ExtractionError("one", "corrupt")),
        FakeAdapter("two", 2, error=ValueError("bad header")),
        FakeAdapter("skipped", 3, handles=False),
        FakeAdapter("three", 10, error=ExtractionError("three", "Unrecognized binary content")),
    ]
    pipeline = ParsePipeline(registry=AdapterRegistry(adapters))

    with pytest.raises(AllAdaptersFailedError) as exc:
        pipeline.parse(b"\x00\x01", "application/octet-stream", "blob")

    assert [(e.adapter_name, e.message) for e in exc.value.errors] == [
        ("one", "corrupt"),
        ("two", "bad header"),
        ("three", "Unrecognized binary content"),
    ]
    assert str(exc.value).startswith("All parsing methods failed. Errors: one: corrupt")
    assert adapters[2].calls == 0


def test_no_applicable_adapter_raises() -> None:
    pipeline = ParsePipeline(registry=AdapterRegistry([FakeAdapter("never", 1, handles=False)]))

    with pytest.raises(AllAdaptersFailedError) as exc:
        pipeline.parse(b"x", "application/zip", "a.zip")

    assert exc.value.errors == []


def test_failures_kept_alongside_successful_result() -> None:
    pipeline = ParsePipeline(
        registry=AdapterRegistry(
            [
                FakeAdapter("broken", 1, error=ExtractionError("broken", "decode failed")),
                FakeAdapter("works", 2, text="Jane Smith\njane@example.com"),
            ]
        )
    )

    outcome = pipeline.parse(b"x", "text/plain", "cv.txt")

    assert outcome.result.adapter_name == "works"
    assert [e.adapter_name for e in outcome.errors] == ["broken"]
    assert outcome.candidate.email == "jane@example.com"


def test_empty_text_never_wins_over_non_empty_text() -> None:
    class SlowAdapter(FakeAdapter):
        def extract(self, buffer, mime_type, filename):
            time.sleep(0.02)
            return super().extract(buffer, mime_type, filename)

    pipeline = ParsePipeline(
        registry=AdapterRegistry(
            [
                FakeAdapter("pdf-text", 1, text=""),
                SlowAdapter("ocr", 2, text="Jane Smith\njane@example.com"),
            ]
        )
    )

    outcome = pipeline.parse(b"%PDF", "application/pdf", "scan.pdf")

    assert outcome.result.adapter_name == "ocr"
    assert outcome.candidate.email == "jane@example.com"
    assert [r.adapter_name for r in outcome.all_results] == ["pdf-text", "ocr"]


def test_empty_text_returned_when_nothing_else_exists() -> None:
    pipeline = ParsePipeline(registry=AdapterRegistry([FakeAdapter("pdf-text", 1, text="")]))

    outcome = pipeline.parse(b"%PDF", "application/pdf", "scan.pdf")

    assert outcome.result.adapter_name == "pdf-text"
    assert outcome.result.text == ""


def test_selector_breaks_confidence_tie_by_length() -> None:
    pipeline = ParsePipeline(
        registry=AdapterRegistry(
            [
                FakeAdapter("short", 1, text="s" * 1100),
                FakeAdapter("long", 2, text="l" * 1900),
            ]
        ),
        thresholds=PipelineThresholds(early_stop_confidence=1.0),
    )

    outcome = pipeline.parse(b"x", "text/plain", "cv.txt")

    assert outcome.result.adapter_name == "long"
    assert len(outcome.all_results) == 2


def test_remote_result_above_threshold_short_circuits() -> None:
    local = FakeAdapter("local", 1, text="local text")
    remote = FakeRemote(text="r" * 1500)
    pipeline = ParsePipeline(registry=AdapterRegistry([local]), remote_client=remote)

    outcome = pipeline.parse(b"%PDF", "application/pdf", "cv.pdf")

    assert outcome.delegated is True
    assert outcome.result.adapter_name == "remote"
    assert local.calls == 0
    assert [r.adapter_name for r in outcome.all_results] == ["remote"]


def test_remote_result_at_threshold_falls_through() -> None:
    local = FakeAdapter("local", 1, text="l" * 990)
    remote = FakeRemote(text="r" * 800)
    pipeline = ParsePipeline(
        registry=AdapterRegistry([local]),
        remote_client=remote,
        thresholds=PipelineThresholds(remote_accept_confidence=0.6),
    )

    outcome = pipeline.parse(b"%PDF", "application/pdf", "cv.pdf")

    assert outcome.delegated is False
    assert local.calls == 1
    assert [r.adapter_name for r in outcome.all_results] == ["remote", "local"]
    assert outcome.result.adapter_name == "local"


def test_remote_failure_is_recorded_and_local_chain_runs() -> None:
    remote = FakeRemote(error=RemoteDelegationError("CV parsing service is unavailable"))
    pipeline = ParsePipeline(
        registry=AdapterRegistry([FakeAdapter("local", 1, text="Jane Smith")]),
        remote_client=remote,
    )

    outcome = pipeline.parse(b"%PDF", "application/pdf", "cv.pdf")

    assert outcome.result.adapter_name == "local"
    assert [(e.adapter_name, e.message) for e in outcome.errors] == [
        ("remote", "CV parsing service is unavailable")
    ]


def test_remote_skipped_for_unsupported_type() -> None:
    remote = FakeRemote(text="r" * 1500)
    pipeline = ParsePipeline(
        registry=AdapterRegistry([FakeAdapter("local", 1, text="Jane Smith")]),
        remote_client=remote,
    )

    outcome = pipeline.parse(b"Jane", "text/plain", "cv.txt")

    assert remote.calls == 0
    assert outcome.errors == []


def test_durations_and_names_are_stamped() -> None:
    class Mislabelled(FakeAdapter):
        def extract(self, buffer, mime_type, filename):
            return build_result("something-else", "text")

    pipeline = ParsePipeline(registry=AdapterRegistry([Mislabelled("real", 1)]))

    outcome = pipeline.parse(b"x", "text/plain", "cv.txt")

    assert outcome.result.adapter_name == "real"
    assert outcome.result.duration_ms >= 0


def test_end_to_end_plain_text() -> None:
    text = (
        "Adam Pritchard\n"
        "adam@door10.co.uk\n"
        "+44 20 7123 4567\n"
        "Director at Door 10, 2020–present\n"
        "Worked on public affairs and policy campaigns for clients."
    )
    pipeline = ParsePipeline(registry=AdapterRegistry([PlainTextAdapter()]))

    outcome = pipeline.parse(text.encode("utf-8"), "text/plain", "cv.txt")

    assert outcome.result.adapter_name == "text"
    assert outcome.result.text == text
    assert outcome.result.confidence == pytest.approx(0.3)
    assert outcome.candidate.first_name == "Adam"
    assert outcome.candidate.last_name == "Pritchard"
    assert outcome.candidate.email == "adam@door10.co.uk"
    assert outcome.candidate.phone == "+44 20 7123 4567"
    assert outcome.candidate.experience[0].employer == "Door 10"
    assert outcome.candidate.skills["publicAffairs"] is True
    assert 0.0 < outcome.candidate.confidence <= 0.3


def test_payload_and_audit_log(tmp_path: Path) -> None:
    pipeline = ParsePipeline(registry=AdapterRegistry([PlainTextAdapter()]))
    outcome = pipeline.parse(b"Jane Smith\njane@example.com", "text/plain", "cv.txt")

    payload = build_payload(outcome, filename="cv.txt")

    assert payload["adapterName"] == "text"
    assert payload["firstName"] == "Jane"
    assert payload["allResults"][0]["durationMs"] >= 0
    assert payload["parseMetadata"]["filename"] == "cv.txt"
    assert payload["parseMetadata"]["delegated"] is False

    audit_path = tmp_path / "logs" / "audit.jsonl"
    audit = AuditLogger(audit_path)
    audit.record_outcome("cv.txt", outcome)
    audit.record_failure("blob", AllAdaptersFailedError([]))

    records = [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]
    assert [r["status"] for r in records] == ["ok", "failed"]
    assert records[0]["adapter"] == "text"
    assert records[0]["attempts"] == ["text"]
