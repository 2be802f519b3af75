from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connector configuration (env-friendly).

    Tip: put GCP_API_KEY in a .env file (it is already in .gitignore).
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Places Autocomplete API"
    version: str = "0.1.0"

    # Empty by default so the app can import; the orchestrator rejects it at startup.
    gcp_api_key: str = ""
    language: str = "fr"
    # ISO 3166-1 alpha-2 region codes, e.g. COUNTRIES='["FR", "BE"]'
    countries: List[str] = Field(default_factory=list)

    # Debounce delay in milliseconds.
    timeout_value: float = Field(1500, ge=0)

    autocomp_url: AnyHttpUrl = "https://places.googleapis.com/v1/places:autocomplete"
    geocoding_url: AnyHttpUrl = "https://maps.googleapis.com/maps/api/geocode/json"

    http_timeout_s: float = 20.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
