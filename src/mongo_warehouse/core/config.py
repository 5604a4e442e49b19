"""Hard defaults and process-level settings.

The hard defaults are the last step of the resolution order used when a
connection is made: explicit argument, then the parameter store, then the
values below. Everything that tunes the bootstrapper itself (timeouts, retry
pacing, authentication policy) lives on ``Settings`` and is read from the
environment so tests and deployments can adjust it without code changes.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(ENV_PATH)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 27017
DEFAULT_DATABASE_NAME = ""
DEFAULT_USER = ""
DEFAULT_PASSWORD = ""
DEFAULT_AUTHENTICATE = False

AuthFailurePolicy = Literal["warn", "raise"]


def _float_env(key: str, default: float) -> float:
    value = os.getenv(key)
    return float(value) if value else default


def _int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    return int(value) if value else default


class Settings(BaseModel):
    """Typed representation of environment configuration."""

    default_host: str = Field(default=DEFAULT_HOST, min_length=1)
    default_port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    default_database_name: str = Field(default=DEFAULT_DATABASE_NAME)
    default_user: str = Field(default=DEFAULT_USER)
    default_password: str = Field(default=DEFAULT_PASSWORD)
    default_authenticate: bool = Field(default=DEFAULT_AUTHENTICATE)
    connect_timeout_seconds: float = Field(
        default_factory=lambda: _float_env("MONGO_WAREHOUSE_CONNECT_TIMEOUT", 300.0),
        description="Deadline used when the caller passes no timeout",
    )
    drop_timeout_seconds: float = Field(
        default_factory=lambda: _float_env("MONGO_WAREHOUSE_DROP_TIMEOUT", 60.0)
    )
    retry_interval_seconds: float = Field(
        default_factory=lambda: _float_env("MONGO_WAREHOUSE_RETRY_INTERVAL", 1.0), ge=0.0
    )
    server_selection_timeout_ms: int = Field(
        default_factory=lambda: _int_env("MONGO_WAREHOUSE_SERVER_SELECTION_TIMEOUT_MS", 5_000),
        ge=1,
        description="Upper bound for a single connection attempt",
    )
    auth_failure_policy: AuthFailurePolicy = Field(
        default=os.getenv("MONGO_WAREHOUSE_AUTH_FAILURE_POLICY", "warn"), validate_default=True
    )
    log_level: str = Field(default=os.getenv("MONGO_WAREHOUSE_LOG_LEVEL", "INFO"))
    parameter_prefix: str = Field(default=os.getenv("MONGO_WAREHOUSE_PARAMETER_PREFIX", ""))

    @field_validator("auth_failure_policy", mode="before")
    @classmethod
    def normalize_policy(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per interpreter for reuse across modules."""

    return Settings()
