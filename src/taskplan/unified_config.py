"""Unified configuration loader (taskplan_config.yaml).

Example::

    scheduler:
      calendar:
        day_start: 8
        day_end: 17
        lunch_start: 12
      parameters:
        role_parameter_id: "115"
        level_parameter_id: "2673"
      short_task_minutes: 240
      working_status: in_progress

    field_mappings:
      task: task_name
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError
from .scheduler.config import SchedulingConfig
from .sources import FieldMapping

CONFIG_FILE_NAME = "taskplan_config.yaml"


class UnifiedConfig(BaseModel):
    """Scheduling settings plus the record-key mapping of the data file."""

    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)
    field_mappings: FieldMapping = Field(default_factory=FieldMapping)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from a YAML file.

    Args:
        config_path: Path to taskplan_config.yaml

    Returns:
        UnifiedConfig; sections that are absent use defaults

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigError: If the config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        try:
            data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return UnifiedConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

    try:
        return UnifiedConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e


def discover_config(data_path: Path, config_path: Path | None = None) -> UnifiedConfig:
    """Find and load the config for a data file.

    Search order:
    1. Explicit config_path argument (must exist)
    2. Data file directory / taskplan_config.yaml
    3. Current directory / taskplan_config.yaml

    Returns defaults when no config file is found.
    """
    if config_path is not None:
        return load_unified_config(config_path)

    for candidate in (Path(data_path).parent / CONFIG_FILE_NAME, Path(CONFIG_FILE_NAME)):
        if candidate.exists():
            return load_unified_config(candidate)

    return UnifiedConfig()
