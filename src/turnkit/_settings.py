# Area: Shared
"""
turnkit._settings — Environment-driven engine settings
======================================================

Reads engine defaults from ``TURNKIT_*`` variables. Values come from an
optional dotenv file, overlaid by the process environment:

    TURNKIT_MAX_TURNS=20
    TURNKIT_TURN_TIME_LIMIT=30
    TURNKIT_AUTO_SKIP=true
    TURNKIT_LOG_LEVEL=INFO
    TURNKIT_LOG_FILE=logs/turnkit.log

Empty values count as unset.
"""

import logging
import os
from typing import Dict, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ._engine.config import format_validation_errors
from .errors import ConfigurationError

logger = logging.getLogger("turnkit.settings")

ENV_PREFIX = "TURNKIT_"

SETTINGS_KEYS = [
    "max_turns",
    "turn_time_limit",
    "auto_skip",
    "log_level",
    "log_file",
]


class EngineSettings(BaseModel):
    """Defaults applied by ``TurnEngine.from_settings``."""
    model_config = ConfigDict(frozen=True)

    max_turns: Optional[int] = Field(default=None, gt=0)
    turn_time_limit: Optional[float] = Field(default=None, gt=0)
    auto_skip: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def _collect(source: Dict[str, Optional[str]]) -> Dict[str, str]:
    values = {}
    for key in SETTINGS_KEYS:
        raw = source.get(ENV_PREFIX + key.upper())
        if raw is not None and raw.strip() != "":
            values[key] = raw.strip()
    return values


def load_settings(env_file: Optional[str] = None) -> EngineSettings:
    """
    Load settings from a dotenv file and the process environment.

    Args:
        env_file: Path to a dotenv file. Process variables win over it.

    Returns:
        The validated EngineSettings

    Raises:
        ConfigurationError: If a value cannot be parsed
    """
    values: Dict[str, str] = {}
    if env_file:
        if not os.path.exists(env_file):
            logger.warning("Settings file not found: %s", env_file)
        values.update(_collect(dotenv_values(env_file)))
    values.update(_collect(dict(os.environ)))

    try:
        settings = EngineSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(format_validation_errors(e)) from e

    logger.debug("Loaded settings: %s", settings.model_dump())
    return settings
