# Area: Shared
"""
find_the_ball.config — Engine configuration
===========================================

Settings for the round engine, the HTTP oracle and logging.

Values are read, in increasing priority, from:
    1. Field defaults
    2. A JSON config file (``--config config.json``)
    3. Environment variables (a ``.env`` file is loaded first)

Environment variables:
    FIND_THE_BALL_BOARD_SIZE              -> board_size
    FIND_THE_BALL_REVEAL_SECONDS          -> reveal_seconds
    FIND_THE_BALL_RESULT_DISPLAY_SECONDS  -> result_display_seconds
    FIND_THE_BALL_ORACLE_URL              -> oracle_url
    FIND_THE_BALL_ORACLE_TIMEOUT          -> oracle_timeout_seconds
    FIND_THE_BALL_LOG_FILE                -> log_file
    FIND_THE_BALL_LOG_LEVEL               -> log_level
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from .errors import ConfigFileError

logger = logging.getLogger("find_the_ball.config")

ENV_MAPPINGS = {
    "FIND_THE_BALL_BOARD_SIZE": "board_size",
    "FIND_THE_BALL_REVEAL_SECONDS": "reveal_seconds",
    "FIND_THE_BALL_RESULT_DISPLAY_SECONDS": "result_display_seconds",
    "FIND_THE_BALL_ORACLE_URL": "oracle_url",
    "FIND_THE_BALL_ORACLE_TIMEOUT": "oracle_timeout_seconds",
    "FIND_THE_BALL_LOG_FILE": "log_file",
    "FIND_THE_BALL_LOG_LEVEL": "log_level",
}


class EngineSettings(BaseModel):
    """Validated engine settings. Durations are in seconds."""

    board_size: int = Field(default=3, ge=2)
    reveal_seconds: float = Field(default=1.5, gt=0)
    # None keeps a resolved round on screen until acknowledge()
    result_display_seconds: Optional[float] = Field(default=None, gt=0)
    oracle_url: Optional[str] = None
    oracle_timeout_seconds: float = Field(default=5.0, gt=0)
    log_file: str = "find_the_ball.log"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> EngineSettings:
    """
    Load settings from a JSON file and the environment.

    Args:
        config_path: Optional path to a JSON config file. A missing file
            is logged and ignored.
        environ: Environment to read (defaults to ``os.environ`` after
            loading ``.env``)
        overrides: Highest-priority values (e.g. CLI flags). ``None``
            values are skipped.

    Raises:
        ConfigFileError: If the config file is not valid JSON or not an object
        pydantic.ValidationError: If a value is invalid
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    data: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            data.update(_read_config_file(path))
        else:
            logger.warning(f"Config file not found: {config_path}")

    for env_key, field_name in ENV_MAPPINGS.items():
        if env_key in environ:
            data[field_name] = environ[env_key]

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    return EngineSettings.model_validate(data)


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            content = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigFileError(str(path), f"invalid JSON ({e})")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(str(path), f"cannot be read ({e})")
    if not isinstance(content, dict):
        raise ConfigFileError(
            str(path), f"expected a JSON object, got {type(content).__name__}"
        )
    return content
