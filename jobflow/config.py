import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Upstream job API
    api_base_url: str = "https://jsonfakery.com"
    request_timeout: float = 30.0

    # Response cache
    cache_ttl_seconds: int = 300  # 5 minutes

    # View windowing
    page_size: int = 12
    search_debounce_ms: int = 500

    # Landing page
    featured_limit: int = 6
    popular_tags_limit: int = 5

    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "JOBFLOW_"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply one root logging format for the whole process."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
