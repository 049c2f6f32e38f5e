"""Configuration module for jsoncall."""

from jsoncall.config.loader import load_config, get_config_path
from jsoncall.config.schema import Config, ServeConfig

__all__ = ["Config", "ServeConfig", "load_config", "get_config_path"]
