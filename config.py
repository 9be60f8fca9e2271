import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "Payments Ledger Engine"
    app_version: str = "1.0.0"
    environment: str = "production"

    # Logging settings
    log_level: str = "WARNING"
    log_format: str = "text"  # text or json

    # Output settings
    sort_output: bool = True  # order snapshot rows by client id


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings for the environment named by LEDGER_ENVIRONMENT."""
    return get_settings_for_environment(os.getenv("LEDGER_ENVIRONMENT", "production"))


# Environment-specific configurations
class DevelopmentSettings(Settings):
    environment: str = "development"
    log_level: str = "DEBUG"


class ProductionSettings(Settings):
    environment: str = "production"
    log_level: str = "WARNING"


class TestingSettings(Settings):
    environment: str = "testing"
    log_level: str = "WARNING"
    log_format: str = "text"


def get_settings_for_environment(env: str = "development") -> Settings:
    """Get settings for specific environment."""
    settings_map = {
        "development": DevelopmentSettings,
        "production": ProductionSettings,
        "testing": TestingSettings,
    }

    settings_class = settings_map.get(env.lower(), Settings)
    return settings_class()
