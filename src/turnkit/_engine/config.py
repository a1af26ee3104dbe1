# Area: Engine
"""
turnkit._engine.config — Engine configuration validation
========================================================

Validates the construction input of a TurnEngine and converts any
failure into a ConfigurationError.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import ConfigurationError, InvalidPlayerError
from ..types import Player

logger = logging.getLogger("turnkit.engine.config")


class EngineConfig(BaseModel):
    """Validated construction input for TurnEngine."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    players: List[Player] = Field(min_length=1)
    on_turn_change: Callable[..., Any]
    on_game_over: Callable[..., Any]
    max_turns: Optional[int] = Field(default=None, gt=0)
    turn_time_limit: Optional[float] = Field(default=None, gt=0)
    auto_skip: Optional[bool] = True

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "EngineConfig":
        seen = set()
        duplicates = []
        for player in self.players:
            if player.id in seen and player.id not in duplicates:
                duplicates.append(player.id)
            seen.add(player.id)
        if duplicates:
            raise ValueError(f"Player IDs must be unique, duplicated: {duplicates}")
        return self

    @property
    def timer_enabled(self) -> bool:
        """True when a per-turn timeout should be armed on each turn start."""
        return self.turn_time_limit is not None and self.auto_skip is not False


def build_config(raw: Dict[str, Any]) -> EngineConfig:
    """
    Validate raw construction arguments.

    Args:
        raw: Keyword arguments given to TurnEngine

    Returns:
        The validated EngineConfig

    Raises:
        ConfigurationError: With one message per validation failure
    """
    try:
        return EngineConfig(**raw)
    except ValidationError as e:
        errors = format_validation_errors(e)
        logger.debug("Rejected engine configuration: %s", errors)
        raise ConfigurationError(errors) from e


def coerce_player(value: Union[Player, Mapping[str, Any]]) -> Player:
    """
    Return *value* as a Player, validating mappings.

    Raises:
        InvalidPlayerError: If the value cannot be read as a Player
    """
    if isinstance(value, Player):
        return value
    try:
        return Player.model_validate(value)
    except ValidationError as e:
        raise InvalidPlayerError(format_validation_errors(e)) from e


def format_validation_errors(error: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into readable messages."""
    messages = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return messages
