"""
Static in-memory provider

Serves lookups from a mapping loaded from a dict or a YAML/JSON file:

    records:
      203.0.113.5:
        city: Miami
        region: FL
        country: United States
        country_code: US
        continent_code: NA
    regions:
      US: {FL: Florida}
    timezones:
      US: {FL: America/New_York}
"""

import os
import time
import logging
from typing import Any, Dict, Optional

import pycountry
import yaml

from .base import GeoProvider
from ..errors import ConfigurationError
from ..schemas.geo import GeoRecord
from ..services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geo.provider.static")

DEMO_DATA = {
    "records": {
        "203.0.113.5": {
            "city": "Miami", "region": "FL", "postal_code": "33101",
            "latitude": 25.7743, "longitude": -80.1937, "area_code": 305,
            "country": "United States", "country_code": "US", "continent_code": "NA",
        },
        "198.51.100.7": {
            "city": "Toronto", "region": "ON", "postal_code": "M5H",
            "latitude": 43.6532, "longitude": -79.3832,
            "country": "Canada", "country_code": "CA", "continent_code": "NA",
        },
        "192.0.2.44": {
            "city": "London", "region": "ENG",
            "latitude": 51.5085, "longitude": -0.1257,
            "country": "United Kingdom", "country_code": "GB", "continent_code": "EU",
        },
    },
    "regions": {"US": {"FL": "Florida"}, "CA": {"ON": "Ontario"}},
    "timezones": {"US": {"FL": "America/New_York"}, "CA": {"ON": "America/Toronto"}},
}


class StaticProvider(GeoProvider):
    """Provider backed by a fixed mapping of IP to record"""

    def __init__(self, data: Optional[Dict[str, Any]] = None, path: str = ""):
        super().__init__("static")
        self.path = path
        self._data = data
        self._records: Dict[str, Dict[str, Any]] = {}
        self._regions: Dict[str, Dict[str, str]] = {}
        self._timezones: Dict[str, Dict[str, str]] = {}

    def load(self) -> bool:
        data = self._data
        if data is None:
            if not self.path or not os.path.exists(self.path):
                logger.error(f"Static geo data file not found at {self.path}")
                prometheus_metrics.set_provider_loaded(self.name, False)
                return False
            try:
                with open(self.path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load static geo data {self.path}: {e}")
                self.error_count += 1
                prometheus_metrics.set_provider_loaded(self.name, False)
                return False

        if not isinstance(data, dict):
            raise ConfigurationError("static geo data must be a mapping")

        self._records = {str(ip): dict(rec or {}) for ip, rec in (data.get("records") or {}).items()}
        self._regions = {cc.upper(): dict(v) for cc, v in (data.get("regions") or {}).items()}
        self._timezones = {cc.upper(): dict(v) for cc, v in (data.get("timezones") or {}).items()}
        self.loaded = True
        self.last_refresh = time.time()
        prometheus_metrics.set_provider_loaded(self.name, True)
        logger.info(f"Static geo data loaded: {len(self._records)} records")
        return True

    def _get(self, ip: str) -> Optional[Dict[str, Any]]:
        self.ensure_loaded()
        return self._records.get(ip)

    def lookup_record(self, ip: str) -> Optional[GeoRecord]:
        rec = self._get(ip)
        if not rec:
            return None
        return GeoRecord.from_dict(rec)

    def lookup_country_name(self, ip: str) -> Optional[str]:
        rec = self._get(ip)
        return rec.get("country") if rec else None

    def lookup_country_code(self, ip: str, alpha: int = 2) -> Optional[str]:
        rec = self._get(ip)
        if not rec or not rec.get("country_code"):
            return None
        if alpha == 2:
            return rec["country_code"]
        if rec.get("country_code3"):
            return rec["country_code3"]
        country = pycountry.countries.get(alpha_2=rec["country_code"])
        return country.alpha_3 if country else None

    def lookup_continent_code(self, ip: str) -> Optional[str]:
        rec = self._get(ip)
        return rec.get("continent_code") if rec else None

    def lookup_region_name(self, country_code2: str, region_code: str) -> Optional[str]:
        self.ensure_loaded()
        return self._regions.get(country_code2.upper(), {}).get(region_code)

    def lookup_timezone(self, country_code2: str, region_code: str) -> Optional[str]:
        self.ensure_loaded()
        return self._timezones.get(country_code2.upper(), {}).get(region_code)

    def get_status(self):
        status = super().get_status()
        status["records"] = len(self._records)
        return status
