# src/tourmatrix/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/tourmatrix/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `TOURMATRIX_PRECOMPUTE_LIMIT`, `TOURMATRIX_LOG_LEVEL`)
- an external YAML file via `TOURMATRIX_CONFIG_PATH`

Design rule:
- Size thresholds and matrix flags live in YAML, not hard-coded in the matrix code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from tourmatrix.core.env import load_dotenv_if_present, resolve_project_path


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `tourmatrix.config`."""
    text = resources.files("tourmatrix.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "tourmatrix"
    log_level: str = "INFO"


class MatrixSettings(BaseModel):
    """Knobs consumed by `MatrixProvider`."""

    # Distances are precomputed when (node_count - 1) < this limit.
    precompute_distance_size_limit: int = Field(2000, ge=0)
    round_distances: bool = False
    # Never propose node 0 (the depot) as a neighbor candidate.
    exclude_depot_candidates: bool = False


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    matrix: MatrixSettings = Field(default_factory=MatrixSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Values are passed through as strings; Pydantic coerces them during validation.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("TOURMATRIX_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    limit = os.getenv("TOURMATRIX_PRECOMPUTE_LIMIT")
    if limit:
        data.setdefault("matrix", {})["precompute_distance_size_limit"] = limit

    rounded = os.getenv("TOURMATRIX_ROUND_DISTANCES")
    if rounded:
        data.setdefault("matrix", {})["round_distances"] = rounded

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("TOURMATRIX_CONFIG_PATH")
    raw = _read_yaml_file(resolve_project_path(config_path)) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
