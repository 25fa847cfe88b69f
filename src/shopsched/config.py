"""Configuration file loading.

The config file (``shopsched.yaml``) is YAML with a ``scheduler`` section::

    scheduler:
      rule: lpt
      max_repair_iterations: 50
      auto_fix: true
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, Field

from .exceptions import ParseError, ValidationError
from .scheduler import SchedulingConfig

DEFAULT_CONFIG_FILENAME = "shopsched.yaml"


class ShopSchedConfig(BaseModel):
    """Top-level configuration."""

    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)


def load_config(config_path: Path | str) -> ShopSchedConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the config file

    Returns:
        ShopSchedConfig; sections missing from the file keep their defaults

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ParseError: If the file is not valid YAML or not a mapping
        ValidationError: If a section fails schema validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open() as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return ShopSchedConfig()
    if not isinstance(data, dict):
        raise ParseError(f"Config file {config_path} must contain a mapping")

    try:
        return ShopSchedConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid configuration in {config_path}: {e}") from e


def discover_config(explicit_path: Path | None = None) -> Path | None:
    """Find the config file to use.

    An explicit path wins; otherwise ``shopsched.yaml`` in the current
    directory is used when it exists.
    """
    if explicit_path is not None:
        return explicit_path
    default = Path(DEFAULT_CONFIG_FILENAME)
    return default if default.exists() else None
