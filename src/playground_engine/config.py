"""Application configuration."""

import os
from datetime import timedelta
from typing import Literal

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from playground_engine.domain.sessions import SessionDefaults

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Durations are expressed in whole minutes.
    """

    admin_token: str
    namespace: str = "playground"
    host: str | None = None
    default_host: str = "localhost"
    session_default_duration: PositiveInt = 45
    session_max_duration: PositiveInt = 240
    session_default_pool_affinity: str = "default"
    session_default_max_per_node: PositiveInt = 6
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def session_defaults(settings: Settings) -> SessionDefaults:
    """Build the session policy from settings."""
    return SessionDefaults(
        duration=timedelta(minutes=settings.session_default_duration),
        max_duration=timedelta(minutes=settings.session_max_duration),
        pool_affinity=settings.session_default_pool_affinity,
        max_sessions_per_node=settings.session_default_max_per_node,
    )
