"""
geofacade - IP geolocation lookups with per-request caching
"""

from .context import GeoContext
from .errors import ConfigurationError, GeoError, MisuseError
from .geo import Geo

__all__ = ["Geo", "GeoContext", "GeoError", "ConfigurationError", "MisuseError"]
