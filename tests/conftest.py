# tests/conftest.py
from collections import Counter

import pytest

from geofacade.context import GeoContext
from geofacade.geo import Geo
from geofacade.providers import StaticProvider, set_provider

GEO_DATA = {
    "records": {
        # Miami, Florida
        "203.0.113.5": {
            "city": "Miami", "region": "FL", "postal_code": "33101",
            "latitude": 25.7743, "longitude": -80.1937, "area_code": 305,
            "country": "United States", "country_code": "US", "continent_code": "NA",
        },
        # London, no region table for GB
        "192.0.2.44": {
            "city": "London", "region": "ENG", "postal_code": "",
            "latitude": 51.5085, "longitude": -0.1257,
            "country": "United Kingdom", "country_code": "GB", "continent_code": "EU",
        },
        # Egypt, record present but city empty
        "198.51.100.20": {
            "city": "", "region": "", "latitude": 30.0, "longitude": None,
            "country": "Egypt", "country_code": "EG", "continent_code": "AF",
        },
        # Canada, province only
        "198.51.100.7": {
            "city": "", "region": "ON",
            "country": "Canada", "country_code": "CA", "continent_code": "NA",
        },
    },
    "regions": {"US": {"FL": "Florida"}, "CA": {"ON": "Ontario"}},
    "timezones": {"US": {"FL": "America/New_York"}, "CA": {"ON": "America/Toronto"}},
}


class CountingProvider(StaticProvider):
    """Static provider that counts every call per capability and arguments"""

    def __init__(self, data=None):
        super().__init__(data=data if data is not None else GEO_DATA)
        self.calls = Counter()

    def lookup_record(self, ip):
        self.calls[("record", ip)] += 1
        return super().lookup_record(ip)

    def lookup_country_name(self, ip):
        self.calls[("country_name", ip)] += 1
        return super().lookup_country_name(ip)

    def lookup_country_code(self, ip, alpha=2):
        self.calls[("country_code", ip, alpha)] += 1
        return super().lookup_country_code(ip, alpha)

    def lookup_continent_code(self, ip):
        self.calls[("continent_code", ip)] += 1
        return super().lookup_continent_code(ip)

    def lookup_region_name(self, country_code2, region_code):
        self.calls[("region_name", country_code2, region_code)] += 1
        return super().lookup_region_name(country_code2, region_code)

    def lookup_timezone(self, country_code2, region_code):
        self.calls[("timezone", country_code2, region_code)] += 1
        return super().lookup_timezone(country_code2, region_code)


@pytest.fixture
def provider():
    p = CountingProvider()
    p.load()
    return p


@pytest.fixture
def geo(provider):
    return Geo(provider, GeoContext(peer_addr="10.0.0.1"))


@pytest.fixture
def client(provider):
    """FastAPI TestClient serving the counting provider"""
    from fastapi.testclient import TestClient
    from geofacade.main import app

    set_provider(provider)
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        set_provider(None)
