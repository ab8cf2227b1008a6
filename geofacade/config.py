"""
Configuration module for geofacade
"""

import os
from pathlib import Path


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _read_version_from_repo(default: str = "dev") -> str:
    try:
        # repo root: geofacade/.. (one parent up)
        version_file = Path(__file__).resolve().parents[1] / "VERSION"
        v = version_file.read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    return os.getenv("APP_VERSION", default)


API_VERSION = _read_version_from_repo()

# API configuration
API_PREFIX = "/v1"

# Provider configuration
GEO_PROVIDER = os.getenv("GEO_PROVIDER", "maxmind").lower()
GEOIP_DB_CITY = os.getenv("GEOIP_DB_CITY", "/data/geo/GeoLite2-City.mmdb")
GEO_STATIC_FILE = os.getenv("GEO_STATIC_FILE", "")

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_EXCLUDE_PATHS = set(os.getenv("LOG_EXCLUDE_PATHS", "/v1/health,/v1/metrics/prometheus").split(","))


class RuntimeConfig:
    """Runtime configuration manager for request-time flags"""

    def __init__(self):
        self._flags = {}
        self._load_from_env()

    def _load_from_env(self):
        """Load flags from environment variables"""
        self._flags = {
            "HTTP_TRUST_XFF": env_bool("HTTP_TRUST_XFF", True),
            "DEMO_MODE": env_bool("DEMO_MODE", False),
        }

    def get(self, key: str, default=None):
        """Get a flag value"""
        return self._flags.get(key, default)

    def set(self, key: str, value: bool):
        """Set a flag value"""
        if key in self._flags:
            self._flags[key] = bool(value)

    def get_all(self) -> dict:
        """Get all flags"""
        return self._flags.copy()


# Global runtime config instance
runtime_config = RuntimeConfig()


def get_http_trust_xff() -> bool:
    """Get HTTP trust X-Forwarded-For flag"""
    return runtime_config.get("HTTP_TRUST_XFF", True)


def get_demo_mode() -> bool:
    return runtime_config.get("DEMO_MODE", False)
