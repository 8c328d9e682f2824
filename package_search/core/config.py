"""
Runtime configuration read from environment variables.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from package_search.domain.errors import ConfigurationError

DB_PATH_ENV_VAR = "DB_PATH"
API_PORT_ENV_VAR = "API_PORT"
API_HOST_ENV_VAR = "API_HOST"
TIMEOUT_ENV_VAR = "SEARCH_API_TIMEOUT"
MAX_RESULTS_ENV_VAR = "SEARCH_API_MAX_RESULTS"
MASK_ERRORS_ENV_VAR = "SEARCH_API_MASK_ERRORS"
LOG_LEVEL_ENV_VAR = "SEARCH_API_LOG_LEVEL"

DEFAULT_API_PORT = 8126
DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_RESULTS = 150


class Settings(BaseModel):
    """
    Settings for one running API process.
    """

    db_path: str = Field(
        min_length=1,
        description="Location of the SQLite repository index, opened read-only.",
    )
    api_host: str = Field(default="0.0.0.0", description="Interface to listen on.")
    api_port: int = Field(
        default=DEFAULT_API_PORT, ge=1, le=65535, description="Port to listen on."
    )
    request_timeout: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Wall-clock budget in seconds for a whole search request.",
    )
    max_results: int = Field(
        default=DEFAULT_MAX_RESULTS,
        ge=1,
        le=DEFAULT_MAX_RESULTS,
        description="Maximum number of rows a search returns; never above 150.",
    )
    mask_errors: bool = Field(
        default=False,
        description="If True, storage error text is replaced with a generic message.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ConfigurationError: If DB_PATH is absent or any value fails validation.
    """
    env = os.environ if environ is None else environ

    db_path = env.get(DB_PATH_ENV_VAR)
    if not db_path:
        raise ConfigurationError(f"{DB_PATH_ENV_VAR} environment is not present.")

    raw = {"db_path": db_path}
    optional = {
        "api_host": API_HOST_ENV_VAR,
        "api_port": API_PORT_ENV_VAR,
        "request_timeout": TIMEOUT_ENV_VAR,
        "max_results": MAX_RESULTS_ENV_VAR,
        "mask_errors": MASK_ERRORS_ENV_VAR,
        "log_level": LOG_LEVEL_ENV_VAR,
    }
    for field, var in optional.items():
        value = env.get(var)
        if value:
            raw[field] = value

    try:
        return Settings(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
