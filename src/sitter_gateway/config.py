"""Configuration and environment loading for the sitter gateway."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    supabase_url: str
    supabase_pb_key: str  # anon key, token introspection only
    supabase_service_role_key: str

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Covers the auth middleware plus the route handler
    request_timeout_seconds: float = 30.0

    # Which halves of signup this gateway owns
    full_signup_enabled: bool = True
    profile_signup_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
