# =============================================================================
# Settings - Environment Configuration
# =============================================================================
# Compatibility switches for the event adapter, read from the Lambda
# environment once per process.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    """
    Event adapter configuration.

    Attributes:
        strip_body_quotes: Remove every '"' from gateway response bodies
            (legacy wire compatibility).
        lenient_parse: Pass unparsable generic payloads through as raw
            bytes instead of failing the invocation.
        log_payloads: Log incoming event bodies at INFO.
        log_level: Root log level applied by the Lambda entry adapter.
    """
    strip_body_quotes: bool = True
    lenient_parse: bool = False
    log_payloads: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            strip_body_quotes=_env_flag("EVENT_ADAPTER_STRIP_BODY_QUOTES", "true"),
            lenient_parse=_env_flag("EVENT_ADAPTER_LENIENT_PARSE", "false"),
            log_payloads=_env_flag("EVENT_ADAPTER_LOG_PAYLOADS", "true"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


# Global settings instance
_global_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create global Settings instance."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _global_settings
    _global_settings = None
