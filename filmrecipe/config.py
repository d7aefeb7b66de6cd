# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Configuration for analysis and export.

Values live in frozen dataclasses so a loaded configuration can be shared
between concurrent callers. ``load_config`` reads an optional YAML file;
``${VAR}`` references in string values are expanded from the environment.

Example config.yaml::

    analysis:
      max_size: 256
    export:
      profile_strength: 0.5
      group_name: Film Recipe Wizard
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from filmrecipe.errors import ValidationError

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """
    Parameters for the color analyzer.

    Attributes:
        max_size: Images are resized to fit inside max_size x max_size
        quantize_step: Bucket width used when counting dominant colors
        max_dominant: Number of dominant colors reported
    """
    max_size: int = 256
    quantize_step: int = 16
    max_dominant: int = 5

    def __post_init__(self) -> None:
        if self.max_size < 1:
            raise ValidationError(f"max_size must be >= 1, got {self.max_size}")
        if not 1 <= self.quantize_step <= 256:
            raise ValidationError(
                f"quantize_step must be 1-256, got {self.quantize_step}"
            )
        if not 1 <= self.max_dominant <= 5:
            raise ValidationError(
                f"max_dominant must be 1-5, got {self.max_dominant}"
            )


@dataclass(frozen=True, slots=True)
class ExportConfig:
    """
    Defaults applied by the export orchestrator.

    Attributes:
        profile_strength: Fixed strength applied to camera profile exports
        group_name: Preset group shown in Lightroom
        cluster: Lightroom preset cluster identifier
        timestamp_format: strftime pattern used in synthesized filenames
    """
    profile_strength: float = 0.5
    group_name: str = "Film Recipe Wizard"
    cluster: str = "film-recipe-wizard"
    timestamp_format: str = "%Y%m%d-%H%M%S"

    def __post_init__(self) -> None:
        if not 0.0 <= self.profile_strength <= 2.0:
            raise ValidationError(
                f"profile_strength must be 0-2, got {self.profile_strength}"
            )


@dataclass(frozen=True, slots=True)
class Config:
    """Top-level configuration."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Build from a parsed YAML mapping, rejecting unknown keys."""
        unknown = set(data) - {"analysis", "export"}
        if unknown:
            raise ValidationError(f"Unknown config sections: {sorted(unknown)}")
        return cls(
            analysis=_build(AnalysisConfig, data.get("analysis") or {}),
            export=_build(ExportConfig, data.get("export") or {}),
        )


def _build(cls: type, data: dict) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a mapping for {cls.__name__}, got {type(data).__name__}")
    types = {f.name: f.type for f in fields(cls)}
    unknown = set(data) - set(types)
    if unknown:
        raise ValidationError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    kwargs = {}
    for key, value in data.items():
        # Environment expansion always yields strings
        if isinstance(value, str) and types[key] in ("int", "float"):
            try:
                value = int(value) if types[key] == "int" else float(value)
            except ValueError as e:
                raise ValidationError(f"{cls.__name__}.{key}: {e}") from e
        kwargs[key] = value
    return cls(**kwargs)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} references, leaving unknown names as-is."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    if isinstance(obj, str):
        return _ENV_VAR_RE.sub(lambda m: os.getenv(m.group(1), m.group(0)), obj)
    return obj


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file. None or a missing file yields
            the defaults.

    Returns:
        Config instance.

    Raises:
        ValidationError: If the file is not valid YAML or has unknown keys.
    """
    if config_path is None:
        return Config()

    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file not found: %s. Using defaults.", path)
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ValidationError(f"Config root must be a mapping: {path}")

    config = Config.from_dict(_expand_env_vars(raw))
    logger.info("Loaded configuration from %s", path)
    return config
