"""
Configuration module for the Ticket Tagger.

Handles all configuration through environment variables with secure defaults.
Never stores sensitive data directly in code.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


DEFAULT_DEVREV_API_URL = "https://api.devrev.ai"


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


@dataclass(frozen=True)
class TaggerConfig:
    """Configuration for the DevRev tagging endpoint."""

    api_url: str = field(
        default_factory=lambda: os.getenv("DEVREV_API_URL", DEFAULT_DEVREV_API_URL)
    )
    api_key: str = field(
        default_factory=lambda: os.getenv("DEVREV_API_KEY", "")
    )

    # Request timeout in seconds
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "30"))
    )

    @property
    def tag_url(self) -> str:
        """Full URL of the tagging endpoint."""
        return f"{self.api_url.rstrip('/')}/tickets/tag"


@dataclass(frozen=True)
class ClassifierConfig:
    """Configuration for the TF-IDF classifier."""

    # YAML file with labeled examples; the built-in corpus is used when unset
    training_data_path: Optional[Path] = field(
        default_factory=lambda: _optional_path("TRAINING_DATA_PATH")
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration aggregating all config sections."""

    tagger: TaggerConfig = field(default_factory=TaggerConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)

    # Logging level
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )

    def validate(self, require_api_key: bool = True) -> list[str]:
        """
        Validate configuration and return list of errors.

        Args:
            require_api_key: Whether a DevRev API key must be present.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        if require_api_key and not self.tagger.api_key:
            errors.append("DEVREV_API_KEY is required")
        if not self.tagger.api_url:
            errors.append("DEVREV_API_URL must not be empty")
        if self.tagger.request_timeout <= 0:
            errors.append("REQUEST_TIMEOUT must be positive")

        path = self.classifier.training_data_path
        if path is not None and not path.is_file():
            errors.append(f"TRAINING_DATA_PATH does not exist: {path}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"LOG_LEVEL is invalid: {self.log_level}")

        return errors


def get_config() -> AppConfig:
    """
    Get application configuration.

    Returns:
        AppConfig instance with all settings loaded from environment.
    """
    return AppConfig()
