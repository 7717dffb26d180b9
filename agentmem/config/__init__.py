"""Configuration module for agentmem."""

from agentmem.config.loader import get_config_path, load_config
from agentmem.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
