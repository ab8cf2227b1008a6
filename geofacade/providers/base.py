"""
Base geolocation provider class
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..errors import ConfigurationError
from ..schemas.geo import GeoRecord

logger = logging.getLogger("geo.provider")


class GeoProvider(ABC):
    """
    Lookup contract consumed by Geo.

    Every lookup returns None (or an empty string) when the database has
    nothing for the key; lookups never raise for a miss.
    """

    def __init__(self, name: str):
        self.name = name
        self.loaded = False
        self.last_refresh = 0
        self.error_count = 0

    @abstractmethod
    def load(self) -> bool:
        """Load the underlying database"""

    @abstractmethod
    def lookup_record(self, ip: str) -> Optional[GeoRecord]:
        pass

    @abstractmethod
    def lookup_country_name(self, ip: str) -> Optional[str]:
        pass

    @abstractmethod
    def lookup_country_code(self, ip: str, alpha: int = 2) -> Optional[str]:
        pass

    @abstractmethod
    def lookup_continent_code(self, ip: str) -> Optional[str]:
        pass

    @abstractmethod
    def lookup_region_name(self, country_code2: str, region_code: str) -> Optional[str]:
        pass

    @abstractmethod
    def lookup_timezone(self, country_code2: str, region_code: str) -> Optional[str]:
        pass

    def ensure_loaded(self) -> None:
        """Raise ConfigurationError unless load() has succeeded"""
        if not self.loaded:
            raise ConfigurationError(f"geo provider '{self.name}' is not loaded")

    def get_status(self) -> Dict[str, Any]:
        """Get provider status"""
        return {
            "name": self.name,
            "status": "loaded" if self.loaded else "missing",
            "last_refresh": self.last_refresh,
            "error_count": self.error_count
        }

    def refresh(self) -> bool:
        """Reload the underlying database"""
        return self.load()

    def close(self) -> None:
        self.loaded = False
