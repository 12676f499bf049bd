"""
Configuration for the specimen viewer.

Values come from defaults, then ``SPECIMEN_VIEWER_*`` environment
variables, then explicit overrides (command-line flags).
"""

from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "SPECIMEN_VIEWER_"

DEFAULT_API_ROOT = "https://dataverse.csuc.cat/api"
DEFAULT_DATAVERSE_ID = "cor-iphes"


class ViewerSettings(BaseSettings):
    """Runtime settings for the API server and its dataset source."""

    api_root: str = Field(default=DEFAULT_API_ROOT, description="Repository API root URL")
    dataverse_id: str = Field(default=DEFAULT_DATAVERSE_ID, description="Collection to list")
    data_dir: Optional[Path] = Field(default=None, description="Snapshot directory")
    offline: bool = Field(default=False, description="Serve snapshots instead of HTTP")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, description="0 picks the first free port")
    log_level: str = Field(default="INFO")
    request_timeout: float = Field(default=30.0, description="Seconds")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("api_root")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_settings(**overrides: Any) -> ViewerSettings:
    """
    Build settings from the environment plus explicit overrides.

    Overrides set to None are ignored so unset CLI flags do not mask
    environment values.
    """
    return ViewerSettings(**{key: value for key, value in overrides.items() if value is not None})
