"""
Geolocation providers
"""

import logging
from typing import List, Optional

from .base import GeoProvider
from .maxmind import MaxMindProvider
from .static import DEMO_DATA, StaticProvider
from ..errors import ConfigurationError

logger = logging.getLogger("geo.provider")


def build_provider(kind: str, db_path: str = "", static_file: str = "", demo: bool = False) -> GeoProvider:
    """Build and load the configured provider, failing fast if it cannot load"""
    if demo:
        provider: GeoProvider = StaticProvider(data=DEMO_DATA)
    elif kind == "maxmind":
        provider = MaxMindProvider(db_path)
    elif kind == "static":
        provider = StaticProvider(path=static_file)
    else:
        raise ConfigurationError(f"unknown geo provider: {kind}")

    provider.load()
    provider.ensure_loaded()
    logger.info(f"geo provider ready: {provider.name}")
    return provider


_provider: Optional[GeoProvider] = None
_retired: List[GeoProvider] = []


def set_provider(provider: Optional[GeoProvider]) -> None:
    global _provider
    _provider = provider


def replace_provider(provider: GeoProvider) -> None:
    """
    Install a new provider. The old one is kept open until close_retired(),
    since in-flight requests may still be reading from it.
    """
    global _provider
    if _provider is not None and _provider is not provider:
        _retired.append(_provider)
    _provider = provider


def close_retired() -> None:
    while _retired:
        _retired.pop().close()


def current_provider() -> Optional[GeoProvider]:
    return _provider


def get_provider() -> GeoProvider:
    if _provider is None:
        raise ConfigurationError("no geo provider configured")
    return _provider


__all__ = [
    "GeoProvider", "MaxMindProvider", "StaticProvider", "DEMO_DATA",
    "build_provider", "set_provider", "get_provider", "current_provider",
    "replace_provider", "close_retired",
]
