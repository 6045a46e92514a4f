"""Runtime settings, read from the environment (and a local .env file)."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Settings shared by the fetcher, the batch scraper and the CLI."""

    user_agent: str = Field(
        default_factory=lambda: os.getenv("SCRAPED_USER_AGENT", DEFAULT_USER_AGENT)
    )
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("SCRAPED_TIMEOUT", "30"))
    )
    # "token" for every host, or "domain|token" entries separated by commas
    bearer_token: Optional[str] = Field(
        default_factory=lambda: os.getenv("SCRAPED_BEARER_TOKEN") or None
    )
    concurrency: int = Field(
        default_factory=lambda: int(os.getenv("SCRAPED_CONCURRENCY", "2")), ge=1
    )
    follow_redirects: bool = Field(
        default_factory=lambda: _env_bool("SCRAPED_FOLLOW_REDIRECTS", "true")
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("SCRAPED_LOG_LEVEL", "INFO").upper()
    )


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
