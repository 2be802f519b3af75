"""Configuration errors raised when an orchestrator is built."""

from __future__ import annotations

NO_GCP_API_KEY_ERROR = "NO_GCP_API_KEY_ERROR"
NO_LANG_ERROR = "You should not set language to empty string"

UNKNOWN_ERROR = "Unknown error"


class ConfigurationError(ValueError):
    pass


class MissingApiKeyError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__(NO_GCP_API_KEY_ERROR)


class EmptyLanguageError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__(NO_LANG_ERROR)
