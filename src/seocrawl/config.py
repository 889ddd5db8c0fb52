from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import json
import os

from seocrawl.constants import (
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)

load_dotenv()  # Loads variables from .env file


@dataclass
class Config:
    """Configuration for a crawlability audit."""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS  # Per request
    max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS
    audit_timeout: Optional[float] = None  # Whole audit, None for no limit
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment
        """
        audit_timeout = os.getenv("SEOCRAWL_AUDIT_TIMEOUT")
        return cls(
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            timeout=float(os.getenv("SEOCRAWL_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_SECONDS))),
            max_concurrent_requests=int(
                os.getenv("SEOCRAWL_MAX_CONCURRENT", str(DEFAULT_MAX_CONCURRENT_REQUESTS))
            ),
            audit_timeout=float(audit_timeout) if audit_timeout else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


@dataclass
class CrawlabilityThresholds:
    """Configurable limits for sitemap analysis and scoring."""

    # Sitemap protocol limits
    max_sitemap_bytes: int = 50 * 1024 * 1024  # 50MB
    max_urls_per_sitemap: int = 50000

    # Uncompressed sitemaps above this size get a gzip suggestion
    compression_suggest_bytes: int = 1024 * 1024  # 1MB

    # Discovery bounds
    numeric_probe_max_index: int = 5  # sitemap-0.xml .. sitemap-5.xml
    max_sitemap_fetches: int = 200  # Per discovery run

    # Recommendations and scoring
    few_urls_threshold: int = 10
    large_url_count_threshold: int = 50
    min_index_children: int = 2

    @classmethod
    def from_env(cls) -> "CrawlabilityThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with SEOCRAWL_THRESHOLD_
        e.g., SEOCRAWL_THRESHOLD_MAX_SITEMAP_FETCHES=50

        Returns:
            CrawlabilityThresholds with values from environment
        """
        thresholds = cls()
        prefix = "SEOCRAWL_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                try:
                    setattr(thresholds, field_name, int(env_value))
                except ValueError:
                    pass  # Keep default if conversion fails

        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "CrawlabilityThresholds":
        """Load thresholds from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            CrawlabilityThresholds with values from file
        """
        thresholds = cls()
        file_path = Path(path)

        if not file_path.exists():
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for field_name in thresholds.__dataclass_fields__:
            if field_name in threshold_config:
                setattr(thresholds, field_name, threshold_config[field_name])

        return thresholds

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary."""
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }

    def save_to_file(self, path: str) -> None:
        """Save current thresholds to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump({'thresholds': self.to_dict()}, f, indent=2)


# Global default thresholds instance
default_thresholds = CrawlabilityThresholds()

# Defaults read from the environment at import time
settings = Config.from_env()
