from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RULEKIT_", env_file=".env", extra="ignore")

    # Evaluation
    MAX_NESTING_DEPTH: int = 32  # nested / nested_collection recursion bound
    LOCALE: str = "en"
    DEFAULT_MESSAGE: str = "The :attribute field is invalid."

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
