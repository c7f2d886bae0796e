"""
config.py — Configuration for the Order Workflow

Settings are read from environment variables (a local `.env` file is
honoured) with defaults suitable for running the demos.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> list:
    return [part.strip() for part in value.split(",") if part.strip()]


class Config:
    """Central configuration for the order workflow and the demo runner."""

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    # Order workflow
    BATCH_MAX_WORKERS: int = int(os.getenv("BATCH_MAX_WORKERS", "8"))
    CURRENCY: str = os.getenv("CURRENCY", "CHF")
    TRACKING_PREFIX: str = os.getenv("TRACKING_PREFIX", "SHIP-")

    # Web scraper demo
    SCRAPER_TIMEOUT: float = float(os.getenv("SCRAPER_TIMEOUT", "10.0"))
    SCRAPER_URLS: list = _split(os.getenv("SCRAPER_URLS", "https://example.com"))
    SCRAPER_KEYWORDS: list = _split(os.getenv("SCRAPER_KEYWORDS", "example,domain"))
    SCRAPER_REQUESTS_PER_MINUTE: float = float(os.getenv("SCRAPER_REQUESTS_PER_MINUTE", "0"))
