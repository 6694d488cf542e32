"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Start-up credential token and app id are read once (get_settings() is lru_cached)
    - Missing token, missing firebase apiKey and missing app id are normal, not errors
    - Secrets come from environment variables or .env (never hardcoded)

Design Decisions:
    - SCHOOLPAY_ prefix: the process shares its environment with the site build
    - firebase_config is the same JSON object the web client is configured with;
      only apiKey is needed server-side
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="SCHOOLPAY_", case_sensitive=False,
    )

    # Session bootstrap
    app_id: str = "default-app-id"
    initial_auth_token: str | None = None
    firebase_config: dict[str, str] = {}
    identity_toolkit_url: str = "https://identitytoolkit.googleapis.com/v1"
    auth_timeout_seconds: float = 30.0

    @field_validator("initial_auth_token", mode="before")
    @classmethod
    def blank_token_is_absent(cls, v: str | None) -> str | None:
        """An empty SCHOOLPAY_INITIAL_AUTH_TOKEN means no token was supplied."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Payments (stand-in endpoint; 2s simulated latency)
    payment_url: str = (
        "https://api.mocky.io/v2/5d47f24c3300006214488390?mocky-delay=2000ms"
    )
    payment_timeout_seconds: float = 30.0
    status_display_seconds: float = 3.0

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def firebase_api_key(self) -> str | None:
        return self.firebase_config.get("apiKey") or None


@lru_cache
def get_settings() -> Settings:
    return Settings()
