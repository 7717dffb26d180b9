"""Configuration loading."""

import json
from pathlib import Path

from pydantic import ValidationError

from agentmem.config.schema import Config
from agentmem.logging import get_logger

logger = get_logger(__name__)


def get_config_path() -> Path:
    """Default configuration file location."""
    return Path.home() / ".agentmem" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Optional path to config file. Uses the default path if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if not path.exists():
        return Config()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("config_load_failed", path=str(path), error=str(e))
        logger.warning("config_using_defaults")
        return Config()
