from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = False  # True for structured JSON, False for colored console output

    # Schemas
    SCHEMA_NAMESPACE: str = "api.schemas"
    DEFAULT_SCHEMA: str = "default"

    # Conversion
    LENIENT_NUMBERS: bool = False  # "12abc" -> 12 and "abc" -> 0 instead of a type error

    model_config = SettingsConfigDict(
        env_prefix="TYPED_SUPPORT_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
