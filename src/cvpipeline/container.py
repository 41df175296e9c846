"""Dependency injection container for the parse pipeline."""

from __future__ import annotations

from dependency_injector import containers, providers

from .adapters import (
    OcrAdapter,
    PdfLayoutAdapter,
    PdfTextAdapter,
    PlainTextAdapter,
    UniversalFallbackAdapter,
    WordAdapter,
)
from .core.fields import CandidateFieldExtractor
from .pipeline import AdapterRegistry, ParsePipeline, PipelineThresholds
from .remote import RemoteParserClient
from .schemas.config import AppConfig


class ParserContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    pdf_text_adapter = providers.Singleton(PdfTextAdapter)
    pdf_layout_adapter = providers.Singleton(
        PdfLayoutAdapter,
        exclude_patterns=config.pdf.exclude_patterns,
    )
    word_adapter = providers.Singleton(WordAdapter)
    text_adapter = providers.Singleton(PlainTextAdapter)
    ocr_adapter = providers.Singleton(
        OcrAdapter,
        enabled=config.ocr_enabled.as_(bool),
        language=config.ocr.language,
        dpi=config.ocr.dpi.as_int(),
        timeout_seconds=config.ocr.timeout_seconds.as_float(),
    )
    fallback_adapter = providers.Singleton(UniversalFallbackAdapter)

    adapter_registry = providers.Singleton(
        AdapterRegistry,
        adapters=providers.List(
            pdf_text_adapter,
            pdf_layout_adapter,
            word_adapter,
            text_adapter,
            ocr_adapter,
            fallback_adapter,
        ),
    )

    remote_client = providers.Selector(
        config.remote_mode,
        enabled=providers.Singleton(
            RemoteParserClient,
            base_url=config.remote.base_url,
            timeout=config.remote.timeout_seconds.as_float(),
            max_upload_bytes=config.remote.max_upload_bytes.as_int(),
        ),
        disabled=providers.Object(None),
    )

    thresholds = providers.Singleton(
        PipelineThresholds,
        remote_accept_confidence=config.thresholds.remote_accept_confidence.as_float(),
        early_stop_confidence=config.thresholds.early_stop_confidence.as_float(),
        early_stop_min_length=config.thresholds.early_stop_min_length.as_int(),
    )

    field_extractor = providers.Singleton(CandidateFieldExtractor)

    pipeline = providers.Factory(
        ParsePipeline,
        registry=adapter_registry,
        remote_client=remote_client,
        thresholds=thresholds,
        field_extractor=field_extractor,
    )


def create_container(*, config: AppConfig | None = None) -> ParserContainer:
    """Instantiate container from validated settings."""

    app_config = config or AppConfig()
    container = ParserContainer()
    settings = app_config.model_dump()
    settings["remote_mode"] = "enabled" if app_config.remote_active else "disabled"
    container.config.from_dict(settings)
    return container
