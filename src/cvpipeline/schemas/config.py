"""Pydantic configuration schema for the parse pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

LogLevel = Literal["error", "warn", "info", "debug"]


class RemoteParserConfig(BaseModel):
    base_url: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class OcrConfig(BaseModel):
    language: str = "eng"
    dpi: int = Field(default=300, gt=0)
    timeout_seconds: float = Field(default=120.0, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class PdfConfig(BaseModel):
    exclude_patterns: tuple[str, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)


class ThresholdConfig(BaseModel):
    remote_accept_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    early_stop_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    early_stop_min_length: int = Field(default=500, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class AppConfig(BaseModel):
    """Process-wide parser settings, read-only once built."""

    ocr_enabled: bool = False
    remote_parser_enabled: bool = False
    log_level: LogLevel = "info"
    remote: RemoteParserConfig = Field(default_factory=RemoteParserConfig)
    ocr: OcrConfig = Field(default_factory=OcrConfig)
    pdf: PdfConfig = Field(default_factory=PdfConfig)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def remote_active(self) -> bool:
        return self.remote_parser_enabled and bool(self.remote.base_url)


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    return AppConfig.model_validate(raw)
