import sys
from functools import lru_cache

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- CONFIGURATION ---

class Settings(BaseSettings):
    """
    Application settings managed via pydantic-settings.
    Loads variables from a .env file or environment variables.
    """
    # Project Info
    APP_NAME: str = "Miruro Search"
    SITE_NAME: str = "Miruro"  # Used for the page title
    VERSION: str = "0.1.0"

    # Catalog API (consumet-style, trailing slash expected)
    API_BASE_URL: str = "http://localhost:3000/"
    REQUEST_TIMEOUT: float = 10.0

    # Pagination
    PAGE_SIZE: int = 17
    MAX_PAGE: int = 10  # Hard cap, regardless of hasNextPage

    # Delay after the last filter change before a request is issued.
    # 0 still coalesces every change made in the same event-loop tick.
    DEBOUNCE_SECONDS: float = 0.0

    LOG_LEVEL: str = "INFO"

    # Pydantic Settings Config
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    """Returns a cached instance of the settings."""
    return Settings()


def configure_logging(level: str = None):
    """Replaces loguru's default sink with a stderr sink at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level or get_settings().LOG_LEVEL)
