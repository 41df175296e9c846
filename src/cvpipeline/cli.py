"""Typer CLI entrypoint for the parse pipeline."""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .config import config_from_env, load_config_file
from .container import create_container
from .logging import configure_logging
from .pipeline import AllAdaptersFailedError, AuditLogger, OutputWriter, build_payload
from .remote import RemoteParserClient

app = typer.Typer(help="CV document parsing CLI.")


def _guess_mime_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    if guessed:
        return guessed
    if path.suffix.lower() == ".docx":
        return "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    return "application/octet-stream"


@app.command()
def parse(
    file: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Document to parse."),
    mime_type: Optional[str] = typer.Option(None, help="Declared MIME type (guessed from the filename if omitted)."),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Write the JSON result here instead of stdout."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: Optional[str] = typer.Option(None, help="Log level: error, warn, info or debug."),
    ocr: Optional[bool] = typer.Option(None, "--ocr/--no-ocr", help="Enable the OCR adapter."),
    remote_url: Optional[str] = typer.Option(None, help="Remote parsing service base URL (enables delegation)."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Extract text and candidate fields from one document."""
    try:
        app_config = load_config_file(config) if config else None
        app_config = config_from_env(base=app_config)
        overrides: dict = {}
        if log_level:
            overrides["log_level"] = log_level.lower()
        if ocr is not None:
            overrides["ocr_enabled"] = ocr
        if remote_url:
            overrides["remote_parser_enabled"] = True
            overrides["remote"] = {**app_config.remote.model_dump(), "base_url": remote_url}
        if overrides:
            app_config = app_config.model_validate({**app_config.model_dump(), **overrides})
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc

    configure_logging(app_config.log_level)

    container = create_container(config=app_config)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None
    declared = mime_type or _guess_mime_type(file)

    try:
        outcome = pipeline.parse(file.read_bytes(), declared, file.name)
    except AllAdaptersFailedError as exc:
        if audit_logger:
            audit_logger.record_failure(file.name, exc)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if audit_logger:
        audit_logger.record_outcome(file.name, outcome)

    payload = build_payload(outcome, filename=file.name)
    if output:
        OutputWriter().write(output, payload)
        typer.echo(
            f"Parsed {file.name} with {outcome.result.adapter_name} "
            f"(confidence {outcome.candidate.confidence:.2f}). Result saved to {output}."
        )
    else:
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command()
def adapters(
    ocr: bool = typer.Option(False, "--ocr/--no-ocr", help="Show the OCR adapter as enabled."),
) -> None:
    """List local adapters in the order they are tried."""
    app_config = config_from_env()
    app_config = app_config.model_validate({**app_config.model_dump(), "ocr_enabled": ocr})
    registry = create_container(config=app_config).adapter_registry()
    for adapter in registry.ordered():
        typer.echo(f"{adapter.priority:>3}  {adapter.name}")


@app.command()
def health(
    remote_url: str = typer.Option(..., help="Remote parsing service base URL."),
) -> None:
    """Check the remote parsing service and list its supported formats."""
    client = RemoteParserClient(remote_url)
    healthy = client.health()
    formats = client.supported_formats() if healthy else []
    typer.echo(
        json.dumps(
            {
                "status": "available" if healthy else "unavailable",
                "url": client.base_url,
                "supportedFormats": formats,
            },
            indent=2,
        )
    )
    if not healthy:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
