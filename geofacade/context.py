"""
Per-request lookup context: subject IP override plus the field cache
"""

import contextvars
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional

from .resolver import resolve_subject_ip
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geo.cache")


class Field(str, Enum):
    RECORD = "record"
    CITY = "city"
    REGION_CODE = "region_code"
    POSTAL_CODE = "postal_code"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    AREA_CODE = "area_code"
    COUNTRY = "country"
    COUNTRY_CODE = "country_code"
    CONTINENT_CODE = "continent_code"
    REGION = "region"
    TIMEZONE = "timezone"


class CacheKey(NamedTuple):
    ip: str
    field: Field
    param: Optional[Any] = None


class GeoContext:
    """
    Lookup state for one logical request.

    Holds the override IP and the ambient client addresses used to resolve
    the subject IP, and caches every computed field (absent values included)
    under (ip, field, param). Switching the subject IP needs no invalidation:
    entries for the previous IP stay cached under their own keys.
    """

    def __init__(self, forwarded_for: Optional[str] = None, peer_addr: Optional[str] = None,
                 ip: Optional[str] = None):
        self.forwarded_for = forwarded_for
        self.peer_addr = peer_addr
        self._override = ip
        self._cache: Dict[CacheKey, Any] = {}
        # re-entrant: derived fields compute their inputs through the cache
        self._lock = threading.RLock()

    def set_ip(self, ip: Optional[str]) -> None:
        self._override = ip

    @property
    def override_ip(self) -> Optional[str]:
        return self._override

    def subject_ip(self) -> Optional[str]:
        return resolve_subject_ip(self._override, self.forwarded_for, self.peer_addr)

    def get_or_compute(self, key: CacheKey, compute: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._cache:
                prometheus_metrics.increment_field_lookup(key.field.value, "hit")
                return self._cache[key]
            value = compute()
            self._cache[key] = value
        outcome = "absent" if value is None else "present"
        prometheus_metrics.increment_field_lookup(key.field.value, outcome)
        logger.debug(f"cached {key.field.value} for {key.ip}", extra={
            "component": "geo.cache",
            "field": key.field.value,
            "outcome": outcome,
        })
        return value

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


# Context bound by the HTTP middleware for the request being served
current_geo_context: contextvars.ContextVar[Optional[GeoContext]] = contextvars.ContextVar(
    "geo_context", default=None
)


def get_current_context() -> Optional[GeoContext]:
    return current_geo_context.get()
