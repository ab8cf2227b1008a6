"""
Error types raised by the geo facade

Lookup misses are never errors: providers return None and accessors
surface that as an absent field.
"""


class GeoError(Exception):
    """Base class for geofacade errors"""


class ConfigurationError(GeoError):
    """Provider missing, not loaded, or otherwise unusable"""


class MisuseError(GeoError):
    """Internal-only operation or invalid argument used through the public surface"""
