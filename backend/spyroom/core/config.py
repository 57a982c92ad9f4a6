"""Application settings for backend runtime and tests."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator
from pydantic_settings import BaseSettings

from wordgrid.models import DEFAULT_MAX_PLAYERS
from wordgrid.policies import DEFAULT_STARTER_POLICY
from wordgrid.policies import STARTER_POLICIES


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    spyroom_app_env: str = "dev"
    spyroom_app_host: str = "127.0.0.1"
    spyroom_app_port: int = Field(default=8000, ge=1)
    spyroom_log_level: str = "INFO"

    spyroom_store: Literal["memory", "sqlite"] = "memory"
    spyroom_sqlite_path: str = "spyroom.db"
    spyroom_cors_allow_origins: str = "*"

    spyroom_max_players: int = Field(default=DEFAULT_MAX_PLAYERS, ge=2, le=50)
    spyroom_starter_policy: str = DEFAULT_STARTER_POLICY
    spyroom_wrong_team_forfeits_turn: bool = True
    spyroom_win_on_team_tiles_exhausted: bool = True

    spyroom_turn_duration_seconds: int = Field(default=60, ge=0)
    spyroom_enforce_turn_timeout: bool = False
    spyroom_sweep_interval_seconds: float = Field(default=1.0, gt=0)
    spyroom_ws_heartbeat_seconds: float = Field(default=30.0, gt=0)

    @field_validator("spyroom_starter_policy")
    @classmethod
    def validate_starter_policy(cls, value: str) -> str:
        if value not in STARTER_POLICIES:
            known = ", ".join(sorted(STARTER_POLICIES))
            raise ValueError(f"SPYROOM_STARTER_POLICY must be one of: {known}")
        return value

    @field_validator("spyroom_log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("SPYROOM_LOG_LEVEL must be a standard logging level name")
        return level

    @model_validator(mode="after")
    def validate_turn_timeout(self) -> "Settings":
        """Server-side expiry needs a positive duration longer than the sweep interval."""
        if not self.spyroom_enforce_turn_timeout:
            return self
        if self.spyroom_turn_duration_seconds <= 0:
            raise ValueError(
                "SPYROOM_TURN_DURATION_SECONDS must be positive when "
                "SPYROOM_ENFORCE_TURN_TIMEOUT is enabled"
            )
        if self.spyroom_sweep_interval_seconds >= self.spyroom_turn_duration_seconds:
            raise ValueError(
                "SPYROOM_SWEEP_INTERVAL_SECONDS must be less than "
                "SPYROOM_TURN_DURATION_SECONDS"
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.spyroom_cors_allow_origins.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
