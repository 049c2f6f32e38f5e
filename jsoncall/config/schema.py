"""Configuration schema using Pydantic.

Persisted (optionally) to ~/.jsoncall/config.json; every field can also be set
through ``JSONCALL_*`` environment variables.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServeConfig(BaseModel):
    """Example service listener."""
    host: str = "127.0.0.1"
    port: int = Field(default=5959, ge=0, le=65535)


class Config(BaseSettings):
    """Root configuration for jsoncall."""
    model_config = SettingsConfigDict(env_prefix="JSONCALL_", env_nested_delimiter="__")

    chunk_size: int = Field(default=4096, gt=0)  # recv() size while reading a response
    half_close: bool = False  # shut down the write side after sending the request
    auto_quote: bool = False  # wrap non-JSON CLI arguments as JSON strings
    log_level: str = "INFO"
    log_to_file: bool = False  # rotating log under ~/.jsoncall/logs
    serve: ServeConfig = Field(default_factory=ServeConfig)
