from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    database_url: str = Field(alias="DATABASE_URL")
    admin_api_key: str = Field(default="", alias="ADMIN_API_KEY")
    service_name: str = Field(default="pokedex-api", alias="SERVICE_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    pokeapi_base_url: str = Field(default="https://pokeapi.co/api/v2", alias="POKEAPI_BASE_URL")
    pokeapi_timeout_seconds: int = Field(default=10, alias="POKEAPI_TIMEOUT_SECONDS")
    roster_size: int = Field(default=151, alias="ROSTER_SIZE")

    seed_fetch_batch_size: int = Field(default=25, alias="SEED_FETCH_BATCH_SIZE")
    seed_insert_batch_size: int = Field(default=50, alias="SEED_INSERT_BATCH_SIZE")
    seed_max_workers: int = Field(default=8, alias="SEED_MAX_WORKERS")

    refresh_rate_limit_max: int = Field(default=3, alias="REFRESH_RATE_LIMIT_MAX")
    refresh_rate_limit_window_seconds: int = Field(default=60, alias="REFRESH_RATE_LIMIT_WINDOW_SECONDS")

    @model_validator(mode="after")
    def validate_required_runtime(self) -> "Settings":
        if not self.database_url.strip():
            raise ValueError("DATABASE_URL is required")
        if not self.pokeapi_base_url.startswith(("http://", "https://")):
            raise ValueError("POKEAPI_BASE_URL must be an http(s) URL")
        if self.pokeapi_timeout_seconds < 1:
            raise ValueError("POKEAPI_TIMEOUT_SECONDS must be >= 1")
        if self.roster_size < 1:
            raise ValueError("ROSTER_SIZE must be >= 1")
        if self.seed_fetch_batch_size < 1:
            raise ValueError("SEED_FETCH_BATCH_SIZE must be >= 1")
        if self.seed_insert_batch_size < 1:
            raise ValueError("SEED_INSERT_BATCH_SIZE must be >= 1")
        if self.seed_max_workers < 1:
            raise ValueError("SEED_MAX_WORKERS must be >= 1")
        if self.refresh_rate_limit_max < 1:
            raise ValueError("REFRESH_RATE_LIMIT_MAX must be >= 1")
        if self.refresh_rate_limit_window_seconds < 1:
            raise ValueError("REFRESH_RATE_LIMIT_WINDOW_SECONDS must be >= 1")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
