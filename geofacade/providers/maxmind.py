"""
MaxMind GeoIP2 provider
Reads a GeoLite2/GeoIP2 City database; alpha-3 codes and region names
that the City database does not carry come from pycountry
"""

import os
import time
import logging
import threading
from typing import Dict, Optional, Tuple

import geoip2.database
import geoip2.errors
import pycountry

from .base import GeoProvider
from ..schemas.geo import GeoRecord
from ..services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geo.provider.maxmind")


class MaxMindProvider(GeoProvider):
    """Provider backed by a MaxMind City .mmdb file"""

    def __init__(self, db_path: str):
        super().__init__("maxmind")
        self.db_path = db_path
        self._reader = None
        # (country_code2, region_code) -> value, filled from City responses
        self._region_names: Dict[Tuple[str, str], str] = {}
        self._timezones: Dict[Tuple[str, str], str] = {}
        self._index_lock = threading.Lock()

    def load(self) -> bool:
        """Open the City database"""
        if not self.db_path or not os.path.exists(self.db_path):
            logger.error(f"GeoIP database not found at {self.db_path}")
            self.loaded = False
            prometheus_metrics.set_provider_loaded(self.name, False)
            return False

        try:
            self._reader = geoip2.database.Reader(self.db_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to open GeoIP database {self.db_path}: {e}")
            self.error_count += 1
            self.loaded = False
            prometheus_metrics.set_provider_loaded(self.name, False)
            return False

        self.loaded = True
        self.last_refresh = time.time()
        prometheus_metrics.set_provider_loaded(self.name, True)
        logger.info("GeoIP database loaded successfully", extra={
            "component": "geo.provider",
            "event": "loaded",
            "db_path": self.db_path
        })
        return True

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        super().close()

    def _city(self, ip: str):
        self.ensure_loaded()
        try:
            response = self._reader.city(ip)
        except geoip2.errors.AddressNotFoundError:
            logger.debug(f"GeoIP address not found: {ip}")
            return None
        except ValueError as e:
            # reader rejects strings that are not IP addresses
            logger.debug(f"GeoIP lookup failed for {ip}: {e}")
            return None
        self._index(response)
        return response

    def _index(self, response) -> None:
        country = response.country.iso_code
        subdivision = response.subdivisions.most_specific
        if not country or not subdivision.iso_code:
            return
        key = (country.upper(), subdivision.iso_code)
        with self._index_lock:
            # first value wins; see lookup_timezone
            if subdivision.name:
                self._region_names.setdefault(key, subdivision.name)
            if response.location.time_zone:
                self._timezones.setdefault(key, response.location.time_zone)

    def lookup_record(self, ip: str) -> Optional[GeoRecord]:
        response = self._city(ip)
        if response is None:
            return None
        return GeoRecord(
            city=response.city.name,
            region=response.subdivisions.most_specific.iso_code,
            postal_code=response.postal.code,
            latitude=response.location.latitude,
            longitude=response.location.longitude,
            area_code=getattr(response.location, "metro_code", None),
        )

    def lookup_country_name(self, ip: str) -> Optional[str]:
        response = self._city(ip)
        return response.country.name if response else None

    def lookup_country_code(self, ip: str, alpha: int = 2) -> Optional[str]:
        response = self._city(ip)
        if response is None or not response.country.iso_code:
            return None
        code = response.country.iso_code
        if alpha == 2:
            return code
        country = pycountry.countries.get(alpha_2=code)
        return country.alpha_3 if country else None

    def lookup_continent_code(self, ip: str) -> Optional[str]:
        response = self._city(ip)
        return response.continent.code if response else None

    def lookup_region_name(self, country_code2: str, region_code: str) -> Optional[str]:
        key = (country_code2.upper(), region_code)
        with self._index_lock:
            name = self._region_names.get(key)
        if name:
            return name
        subdivision = pycountry.subdivisions.get(code=f"{key[0]}-{region_code}")
        return subdivision.name if subdivision else None

    def lookup_timezone(self, country_code2: str, region_code: str) -> Optional[str]:
        """
        Time zone of the first response seen for (country, region).

        The entry is never overwritten, so answers stay stable for the life of
        the provider. Regions spanning several zones (e.g. the Florida
        panhandle) report whichever zone was seen first.
        """
        with self._index_lock:
            return self._timezones.get((country_code2.upper(), region_code))

    def get_status(self):
        status = super().get_status()
        status["db_path"] = self.db_path
        return status
