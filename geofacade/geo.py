"""
Geo lookup facade

Wraps a GeoProvider with typed, memoized accessors for one lookup context.

    geo = Geo(provider, GeoContext(peer_addr=request.client.host))
    geo.set_ip("203.0.113.5")
    geo.get_formatted()    # "Miami, Florida"

Every accessor returns None when the data is absent; none raise for a miss.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from .context import CacheKey, Field, GeoContext
from .errors import ConfigurationError, MisuseError
from .formatting import format_label
from .providers.base import GeoProvider
from .schemas.geo import GeoRecord
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geo")

RECORD_FIELDS = {
    Field.CITY: "city",
    Field.REGION_CODE: "region",
    Field.POSTAL_CODE: "postal_code",
    Field.LATITUDE: "latitude",
    Field.LONGITUDE: "longitude",
    Field.AREA_CODE: "area_code",
}


def _normalize(value: Any) -> Any:
    if value is None or value == "":
        return None
    return value


class Geo:
    """Accessor facade over a provider, scoped to one GeoContext"""

    # Names reachable through call(); everything else is internal
    PUBLIC_ACCESSORS = frozenset({
        "get_ip",
        "get_city",
        "get_country",
        "get_country_code",
        "get_continent_code",
        "get_region",
        "get_region_code",
        "get_province",
        "get_state",
        "get_postal_code",
        "get_zip",
        "get_zip_code",
        "get_area_code",
        "get_lat",
        "get_long",
        "get_coordinates",
        "get_timezone",
        "get_formatted",
        "get_all",
    })

    def __init__(self, provider: Optional[GeoProvider], context: Optional[GeoContext] = None):
        if provider is None:
            raise ConfigurationError("Geo requires a provider")
        self.provider = provider
        self.context = context if context is not None else GeoContext()

    def set_ip(self, ip: Optional[str]) -> None:
        """Override the subject IP for subsequent lookups"""
        self.context.set_ip(ip)

    def get_ip(self) -> Optional[str]:
        return self.context.subject_ip()

    # -- internals ---------------------------------------------------------

    def _cached(self, field: Field, capability: str, compute: Callable[[str], Any],
                param: Any = None) -> Any:
        ip = self.get_ip()
        if ip is None:
            return None

        def run():
            if capability:
                prometheus_metrics.increment_provider_call(capability)
            return _normalize(compute(ip))

        return self.context.get_or_compute(CacheKey(ip, field, param), run)

    def _get_record(self) -> Optional[GeoRecord]:
        return self._cached(Field.RECORD, "record", self.provider.lookup_record)

    def _get_detail(self, field: Field) -> Any:
        def from_record(_ip):
            record = self._get_record()
            if record is None:
                return None
            return getattr(record, RECORD_FIELDS[field])

        return self._cached(field, "", from_record)

    def _by_country_and_region(self, field: Field, capability: str,
                               lookup: Callable[[str, str], Optional[str]]) -> Optional[str]:
        def compute(_ip):
            country_code = self.get_country_code(2)
            region_code = self.get_region_code()
            if country_code is None or region_code is None:
                return None
            prometheus_metrics.increment_provider_call(capability)
            return lookup(country_code, region_code)

        return self._cached(field, "", compute)

    # -- record-backed fields ---------------------------------------------

    def get_city(self) -> Optional[str]:
        return self._get_detail(Field.CITY)

    def get_postal_code(self) -> Optional[str]:
        return self._get_detail(Field.POSTAL_CODE)

    def get_zip_code(self) -> Optional[str]:
        return self.get_postal_code()

    def get_zip(self) -> Optional[str]:
        return self.get_postal_code()

    def get_region_code(self) -> Optional[str]:
        """Raw subdivision code from the record, such as FL or ON"""
        return self._get_detail(Field.REGION_CODE)

    def get_area_code(self):
        return self._get_detail(Field.AREA_CODE)

    def get_lat(self) -> Optional[float]:
        return self._get_detail(Field.LATITUDE)

    def get_long(self) -> Optional[float]:
        return self._get_detail(Field.LONGITUDE)

    def get_coordinates(self) -> Tuple[Optional[float], Optional[float]]:
        """(latitude, longitude), or (None, None) unless both are known"""
        lat, lon = self.get_lat(), self.get_long()
        if lat is None or lon is None:
            return None, None
        return lat, lon

    # -- provider-backed fields -------------------------------------------

    def get_country(self) -> Optional[str]:
        return self._cached(Field.COUNTRY, "country_name", self.provider.lookup_country_name)

    def get_country_code(self, alpha: int = 3) -> Optional[str]:
        """
        ISO 3166-1 country code, alpha-3 by default (USA vs US).

        Each length is cached separately.
        """
        if alpha not in (2, 3):
            raise MisuseError(f"country code length must be 2 or 3, got {alpha!r}")
        return self._cached(
            Field.COUNTRY_CODE,
            "country_code",
            lambda ip: self.provider.lookup_country_code(ip, alpha),
            param=alpha,
        )

    def get_continent_code(self) -> Optional[str]:
        return self._cached(Field.CONTINENT_CODE, "continent_code", self.provider.lookup_continent_code)

    def get_region(self) -> Optional[str]:
        """
        Region name for the subject IP, such as Quebec or California.

        Only resolves where the provider has a region table for the country
        (reliably the US and Canada).
        """
        return self._by_country_and_region(Field.REGION, "region_name", self.provider.lookup_region_name)

    def get_province(self) -> Optional[str]:
        return self.get_region()

    def get_state(self) -> Optional[str]:
        return self.get_region()

    def get_timezone(self) -> Optional[str]:
        return self._by_country_and_region(Field.TIMEZONE, "timezone", self.provider.lookup_timezone)

    # -- derived ----------------------------------------------------------

    def get_formatted(self) -> str:
        """Display label, e.g. "Toronto, Ontario" or "Egypt"; "" when unknown"""
        return format_label(
            self.get_city(),
            self.get_region(),
            self.get_country(),
            self.get_country_code(2),
        )

    def get_all(self) -> Dict[str, Any]:
        lat, lon = self.get_coordinates()
        return {
            "ip": self.get_ip(),
            "city": self.get_city(),
            "country": self.get_country(),
            "country_code": self.get_country_code(2),
            "country_code3": self.get_country_code(3),
            "continent_code": self.get_continent_code(),
            "region": self.get_region(),
            "region_code": self.get_region_code(),
            "postal_code": self.get_postal_code(),
            "area_code": self.get_area_code(),
            "latitude": lat,
            "longitude": lon,
            "timezone": self.get_timezone(),
            "formatted": self.get_formatted(),
        }

    def call(self, name: str, *args) -> Any:
        """Dispatch to a public accessor by name"""
        if name.startswith("_"):
            raise MisuseError(f"Invalid method call: {name}")
        if name not in self.PUBLIC_ACCESSORS:
            raise MisuseError(f"Unknown geo accessor: {name}")
        logger.debug(f"dispatching {name}", extra={"component": "geo", "accessor": name})
        return getattr(self, name)(*args)
