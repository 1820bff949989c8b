from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    project_name: str = "100Days"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO")

    mongodb_uri: str = Field(default="mongodb://mongo:27017")
    mongodb_db: str = Field(default="hundred_days")

    redis_url: str = Field(default="redis://redis:6379/0")

    jwt_secret_key: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=15)
    refresh_token_expire_minutes: int = Field(default=60 * 24 * 7)

    password_hash_scheme: str = Field(default="argon2")

    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000,http://localhost")

    admin_email: str = Field(default="")

    # Challenge rules
    challenge_length_days: int = Field(default=100)
    free_challenge_limit: int = Field(default=2, description="Active challenges allowed without Pro")
    checkin_grace_hour: int = Field(
        default=0,
        ge=0,
        le=23,
        description="Check-ins before this local hour count for the previous day (0 disables)",
    )
    default_timezone: str = Field(default="UTC")
    history_page_size: int = Field(default=20)
    heatmap_months: int = Field(default=6)

    # Quotes
    quote_primary_url: str = Field(
        default="https://api.quotable.io/random?tags=inspirational,motivational,success"
    )
    quote_fallback_url: str = Field(default="https://zenquotes.io/api/random")
    quote_cache_ttl_seconds: int = Field(default=60 * 60 * 24)
    quote_cache_max_size: int = Field(default=50)
    quote_request_timeout: float = Field(default=15.0)

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
