"""Configuration management utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..schemas.config import AppConfig, load_config

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigManager:
    """Simple YAML-backed configuration loader."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load_raw(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        path = self._base_path / f"{name}.yaml"
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    def load(self, name: str) -> AppConfig:
        return load_config(self.load_raw(name))


def load_config_file(path: str | Path) -> AppConfig:
    with Path(path).open("r", encoding="utf-8") as handle:
        return load_config(yaml.safe_load(handle))


def config_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    base: AppConfig | None = None,
) -> AppConfig:
    """Overlay ``CVPIPELINE_*`` environment variables on top of ``base``."""
    environ = os.environ if environ is None else environ
    data = (base or AppConfig()).model_dump()

    if "CVPIPELINE_OCR_ENABLED" in environ:
        data["ocr_enabled"] = environ["CVPIPELINE_OCR_ENABLED"].strip().lower() in _TRUTHY
    if "CVPIPELINE_REMOTE_PARSER_ENABLED" in environ:
        data["remote_parser_enabled"] = (
            environ["CVPIPELINE_REMOTE_PARSER_ENABLED"].strip().lower() in _TRUTHY
        )
    if environ.get("CVPIPELINE_REMOTE_URL"):
        data["remote"]["base_url"] = environ["CVPIPELINE_REMOTE_URL"]
    if environ.get("CVPIPELINE_LOG_LEVEL"):
        data["log_level"] = environ["CVPIPELINE_LOG_LEVEL"].strip().lower()

    return load_config(data)


__all__ = ["ConfigManager", "config_from_env", "load_config_file"]
