"""
Lectio - Configuration

Centralized configuration management for the content engine.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Any, Optional
from enum import Enum

from dotenv import load_dotenv

from core.errors import LectioConfigError

# Load environment variables from .env file
load_dotenv()


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreBackend(Enum):
    """Durable key/value store backends."""
    FILE = "file"
    REDIS = "redis"
    MEMORY = "memory"


@dataclass
class ProviderConfig:
    """Upstream content provider configuration."""
    base_url: str = field(default_factory=lambda: os.getenv("PROVIDER_BASE_URL", "https://bible.helloao.org/api"))
    chapter_path: str = field(default_factory=lambda: os.getenv("PROVIDER_CHAPTER_PATH", "/{translation}/{book}/{chapter}.json"))
    catalog_path: str = field(default_factory=lambda: os.getenv("PROVIDER_CATALOG_PATH", "/available_translations.json"))
    user_agent: str = field(default_factory=lambda: os.getenv("PROVIDER_USER_AGENT", "lectio/1.0"))

    def chapter_url(self, translation_id: str, book_id: str, chapter: int) -> str:
        """Build the chapter endpoint URL."""
        path = self.chapter_path.format(translation=translation_id, book=book_id, chapter=chapter)
        return f"{self.base_url.rstrip('/')}{path}"

    @property
    def catalog_url(self) -> str:
        """Build the catalog endpoint URL."""
        return f"{self.base_url.rstrip('/')}{self.catalog_path}"


@dataclass
class CacheConfig:
    """Two-tier cache configuration. All durations are seconds."""
    backend: StoreBackend = field(default_factory=lambda: StoreBackend(os.getenv("CACHE_BACKEND", "file")))
    store_dir: Path = field(default_factory=lambda: Path(os.getenv("CACHE_STORE_DIR", "./cache/store")))
    redis_url: str = field(default_factory=lambda: os.getenv("CACHE_REDIS_URL", "redis://localhost:6379/0"))

    # Content tier
    content_ttl: float = field(default_factory=lambda: float(os.getenv("CACHE_CONTENT_TTL", str(30 * 24 * 3600))))
    placeholder_ttl: float = field(default_factory=lambda: float(os.getenv("CACHE_PLACEHOLDER_TTL", "3600")))
    hot_ttl: float = field(default_factory=lambda: float(os.getenv("CACHE_HOT_TTL", "3600")))
    hot_max_entries: int = field(default_factory=lambda: int(os.getenv("CACHE_HOT_MAX_ENTRIES", "256")))

    # Catalog tier
    catalog_hot_ttl: float = field(default_factory=lambda: float(os.getenv("CACHE_CATALOG_HOT_TTL", "300")))
    catalog_ttl: float = field(default_factory=lambda: float(os.getenv("CACHE_CATALOG_TTL", str(7 * 24 * 3600))))


@dataclass
class CatalogConfig:
    """Translation catalog selection rules."""
    default_translation: str = field(default_factory=lambda: os.getenv("DEFAULT_TRANSLATION", "eng-web"))
    primary_language: str = field(default_factory=lambda: os.getenv("CATALOG_PRIMARY_LANGUAGE", "eng"))
    per_language_cap: int = field(default_factory=lambda: int(os.getenv("CATALOG_PER_LANGUAGE_CAP", "8")))
    known_working: List[str] = field(default_factory=lambda: _csv(os.getenv(
        "CATALOG_KNOWN_WORKING", "eng-web,eng-kjv,eng-asv,eng-bbe,BSB,spa-rv1909"
    )))
    language_allowlist: List[str] = field(default_factory=lambda: _csv(os.getenv(
        "CATALOG_LANGUAGES", "eng,spa,por,fra,deu"
    )))


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    json_format: bool = field(default_factory=lambda: os.getenv("LOG_FORMAT", "console").lower() == "json")
    log_dir: Path = field(default_factory=lambda: Path(os.getenv("LOG_DIR", "./logs")))
    log_to_file: bool = field(default_factory=lambda: os.getenv("LOG_TO_FILE", "false").lower() == "true")


@dataclass
class ObservabilityConfig:
    """OpenTelemetry configuration."""
    service_name: str = field(default_factory=lambda: os.getenv("OTEL_SERVICE_NAME", "lectio"))
    service_version: str = field(default_factory=lambda: os.getenv("OTEL_SERVICE_VERSION", "1.0.0"))
    tracing_enabled: bool = field(
        default_factory=lambda: os.getenv("OTEL_TRACING_ENABLED", "false").lower() == "true"
    )
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""))
    console_export: bool = field(
        default_factory=lambda: os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true"
    )


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("ENVIRONMENT", "development")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def validate(self) -> "Config":
        """Reject settings the engine cannot run with."""
        cache = self.cache
        if cache.placeholder_ttl >= cache.content_ttl:
            raise LectioConfigError(
                "placeholder_ttl must be shorter than content_ttl",
                config_key="CACHE_PLACEHOLDER_TTL",
                actual_value=cache.placeholder_ttl,
            )
        for key, value in (
            ("CACHE_CONTENT_TTL", cache.content_ttl),
            ("CACHE_PLACEHOLDER_TTL", cache.placeholder_ttl),
            ("CACHE_HOT_TTL", cache.hot_ttl),
            ("CACHE_CATALOG_HOT_TTL", cache.catalog_hot_ttl),
            ("CACHE_CATALOG_TTL", cache.catalog_ttl),
        ):
            if value <= 0:
                raise LectioConfigError(f"{key} must be > 0", config_key=key, actual_value=value)
        if cache.hot_max_entries < 1:
            raise LectioConfigError(
                "CACHE_HOT_MAX_ENTRIES must be >= 1",
                config_key="CACHE_HOT_MAX_ENTRIES",
                actual_value=cache.hot_max_entries,
            )
        if self.catalog.per_language_cap < 1:
            raise LectioConfigError(
                "CATALOG_PER_LANGUAGE_CAP must be >= 1",
                config_key="CATALOG_PER_LANGUAGE_CAP",
                actual_value=self.catalog.per_language_cap,
            )
        if not self.catalog.default_translation:
            raise LectioConfigError("DEFAULT_TRANSLATION must not be empty", config_key="DEFAULT_TRANSLATION")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (excluding connection secrets)."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "provider": {
                "base_url": self.provider.base_url,
            },
            "cache": {
                "backend": self.cache.backend.value,
                "content_ttl": self.cache.content_ttl,
                "placeholder_ttl": self.cache.placeholder_ttl,
                "hot_ttl": self.cache.hot_ttl,
                "catalog_hot_ttl": self.cache.catalog_hot_ttl,
                "catalog_ttl": self.cache.catalog_ttl,
            },
            "catalog": {
                "default_translation": self.catalog.default_translation,
                "primary_language": self.catalog.primary_language,
                "per_language_cap": self.catalog.per_language_cap,
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config().validate()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config().validate()
    return _config
