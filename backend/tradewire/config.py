"""
Application configuration for Tradewire.

Provides:
- Environment-aware settings
- Secrets validation
- Google OAuth / Gmail endpoints
- CORS configuration
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # Environment
    app_env: str = "development"
    environment: str = ""  # Alias for app_env

    # Security
    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours
    encryption_key: str = ""

    # Database
    database_url: str = "sqlite+aiosqlite:///./tradewire_dev.db"

    # Debug
    debug: bool = False

    # CORS
    cors_allowed_origins: list[str] | str = ["http://localhost:3000"]

    # Google OAuth / Gmail
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:8000/oauth2callback"
    google_auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    gmail_api_base_url: str = "https://gmail.googleapis.com/gmail/v1"
    google_http_timeout_seconds: float = 30.0

    @field_validator("jwt_secret_key", "encryption_key", mode="before")
    @classmethod
    def validate_secrets(cls, v: str, info) -> str:
        # app_env and environment are declared first, so they are already loaded
        env = info.data.get("environment") or info.data.get("app_env", "development")
        if not v and env in ("development", "dev", "test"):
            import secrets
            return secrets.token_hex(32)
        if not v:
            raise ValueError(f"{info.field_name} must be set")
        return v

    @property
    def effective_env(self) -> str:
        """Get effective environment name."""
        return self.environment or self.app_env

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.effective_env in ("production", "prod")

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.effective_env in ("development", "dev", "")

    @property
    def cors_origins(self) -> list[str]:
        """Return parsed CORS origins as list."""
        if isinstance(self.cors_allowed_origins, list):
            return self.cors_allowed_origins
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
