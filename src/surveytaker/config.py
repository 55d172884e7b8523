"""Configuration for the survey taker.

Rules:
- Defaults are built in.
- Optional overrides come from a YAML file: the path named by
  `SURVEYTAKER_CONFIG`, else `surveytaker.yaml` in the working directory.
- Environment variables (`SURVEYTAKER_*`) override the file.
- Validation: a Pydantic model enforces value constraints.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

DEFAULT_CONFIG_FILE = Path("surveytaker.yaml")
ENV_PREFIX = "SURVEYTAKER_"
logger = logging.getLogger(__name__)

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class SurveyTakerConfig(BaseModel):
    default_thank_you_text: str = "Your survey response has been recorded. Thank you!"
    default_header_title: str = "SurveyApp"
    default_intro_heading: str = "We value your feedback!"
    default_intro_subheading: str = "Please take a moment to complete this evaluation."
    default_help_text: str = "Please share your perspective with the options below."
    keyboard_shortcuts: bool = True
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LEVELS)}")
        return level


def _read_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return data
            logger.warning("config_file_ignored path=%s reason=not_a_mapping", path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("config_file_unreadable path=%s error=%s", path, e)
    return {}


def _env_overrides() -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for name in SurveyTakerConfig.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return overrides


def load_config(path: Optional[str] = None) -> SurveyTakerConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) YAML file
    3) Built-in defaults
    """
    config_path = Path(path or os.environ.get(ENV_PREFIX + "CONFIG") or DEFAULT_CONFIG_FILE)
    values = _read_yaml_file(config_path)
    values.update(_env_overrides())
    try:
        return SurveyTakerConfig(**values)
    except PydanticValidationError as e:
        logger.error("Invalid survey taker configuration: %s", e)
        raise


__all__ = ["SurveyTakerConfig", "load_config"]
