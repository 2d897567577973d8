import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigError

logger = logging.getLogger(__name__)

# --- Environment-based Settings ---

class AppSettings(BaseSettings):
    """
    Main application settings loaded from environment variables.
    The .env file is loaded automatically by pydantic-settings.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- General & Core ---
    LOG_LEVEL: str = Field("INFO", description="Log level for the application (e.g., DEBUG, INFO, WARNING, ERROR)")
    APP_ENV: str = Field("production", description="Deployment environment reported by /health.")
    PORT: int = Field(5000, description="Port the HTTP server listens on.")

    # --- Providers ---
    PROVIDERS: str = Field("", description="Comma-separated, ordered list of provider URLs.")
    KEY_MAP: str = Field("", description="Comma-separated 'prefix|token' pairs for bearer credentials.")
    PROVIDER_TIMEOUT: int = Field(7000, description="Per-attempt timeout in milliseconds.")
    PROVIDER_ATTEMPTS: int = Field(2, description="Attempts per provider before falling back.")
    PROVIDER_BACKOFF: int = Field(200, description="Linear backoff base delay in milliseconds.")

    # --- Cache ---
    CACHE_TTL: int = Field(30, description="Answer cache time-to-live in seconds.")

    # --- Uploads ---
    UPLOAD_DIR: str = Field("uploads", description="Directory where uploaded files are stored.")

    # --- Rate limiting ---
    RATE_LIMIT_MAX: int = Field(120, description="Requests allowed per client per window.")
    RATE_LIMIT_WINDOW: int = Field(60, description="Rate limit window in seconds.")


def split_providers(raw: Optional[str]) -> List[str]:
    """Split a comma-separated provider list, dropping blanks."""
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def parse_key_map(raw: Optional[str]) -> Dict[str, str]:
    """Parse ``prefix|token,prefix|token`` into an insertion-ordered dict."""
    table: Dict[str, str] = {}
    if not raw:
        return table
    for pair in raw.split(","):
        parts = pair.split("|")
        if len(parts) < 2:
            continue
        prefix, key = parts[0].strip(), parts[1].strip()
        if not prefix or not key:
            continue
        table[prefix] = key
    return table


# --- Engine Config ---

@dataclass(frozen=True)
class GatewayConfig:
    """Immutable dispatch-engine configuration, built once at startup."""
    providers: Tuple[str, ...] = ()
    credentials: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: float = 7.0
    attempts: int = 2
    backoff: float = 0.2
    cache_ttl: float = 30.0

    def __post_init__(self):
        if self.attempts < 1:
            raise ConfigError(f"attempts must be >= 1, got {self.attempts}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.backoff < 0:
            raise ConfigError(f"backoff must not be negative, got {self.backoff}")
        if self.cache_ttl < 0:
            raise ConfigError(f"cache_ttl must not be negative, got {self.cache_ttl}")
        object.__setattr__(self, "providers", tuple(self.providers))
        if not isinstance(self.credentials, MappingProxyType):
            object.__setattr__(self, "credentials", MappingProxyType(dict(self.credentials)))

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "GatewayConfig":
        return cls(
            providers=tuple(split_providers(settings.PROVIDERS)),
            credentials=parse_key_map(settings.KEY_MAP),
            timeout=settings.PROVIDER_TIMEOUT / 1000.0,
            attempts=settings.PROVIDER_ATTEMPTS,
            backoff=settings.PROVIDER_BACKOFF / 1000.0,
            cache_ttl=float(settings.CACHE_TTL),
        )


# --- Global Settings Instance ---
_settings_instance = None

def get_settings() -> AppSettings:
    """
    Returns a singleton instance of the AppSettings object.
    Settings are loaded on first call rather than at import, so tests can
    patch the environment before anything reads it.
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = AppSettings()
        except ValidationError as e:
            logger.critical(f"FATAL: Configuration validation error: {e}")
            raise ConfigError(str(e)) from e
    return _settings_instance

def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None
