"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "estate-map/1.0"


@dataclass(frozen=True)
class Settings:
    dataset_path: str = ""
    source_name: str = "csv"
    csv_delimiter: str = ","
    geocoder_url: str = DEFAULT_GEOCODER_URL
    geocoder_user_agent: str = DEFAULT_USER_AGENT
    geocoder_email: str = ""
    geocoder_timeout: int = 10
    debounce_ms: int = 300
    min_query_length: int = 3
    max_suggestions: int = 5


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer; using %d.", name, raw, default)
        return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    dataset_path = os.getenv("ESTATE_MAP_DATASET", "")
    source_name = os.getenv("ESTATE_MAP_SOURCE", "").strip() or "csv"
    csv_delimiter = os.getenv("ESTATE_MAP_DELIMITER", ",")
    if len(csv_delimiter) != 1:
        logger.warning("ESTATE_MAP_DELIMITER must be a single character; falling back to ','.")
        csv_delimiter = ","
    geocoder_url = os.getenv("GEOCODER_URL", "").strip() or DEFAULT_GEOCODER_URL
    geocoder_user_agent = os.getenv("GEOCODER_USER_AGENT", "").strip() or DEFAULT_USER_AGENT
    geocoder_email = os.getenv("GEOCODER_EMAIL", "").strip()

    if not dataset_path:
        logger.warning("ESTATE_MAP_DATASET is not set; the dataset must be loaded explicitly.")

    return Settings(
        dataset_path=dataset_path,
        source_name=source_name,
        csv_delimiter=csv_delimiter,
        geocoder_url=geocoder_url,
        geocoder_user_agent=geocoder_user_agent,
        geocoder_email=geocoder_email,
        geocoder_timeout=_int_env("GEOCODER_TIMEOUT", 10),
        debounce_ms=_int_env("SUGGEST_DEBOUNCE_MS", 300),
        min_query_length=_int_env("SUGGEST_MIN_CHARS", 3),
        max_suggestions=_int_env("SUGGEST_LIMIT", 5),
    )
