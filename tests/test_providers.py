"""
Tests for geolocation providers
"""

import pytest
from unittest.mock import MagicMock, patch

import geoip2.errors

from geofacade.context import GeoContext
from geofacade.errors import ConfigurationError
from geofacade.geo import Geo
import geofacade.providers as providers
from geofacade.providers import DEMO_DATA, MaxMindProvider, StaticProvider, build_provider


def _city_response(country="US", country_name="United States", region="FL", region_name="Florida",
                   city="Miami", time_zone="America/New_York"):
    response = MagicMock()
    response.country.iso_code = country
    response.country.name = country_name
    response.continent.code = "NA"
    response.city.name = city
    response.subdivisions.most_specific.iso_code = region
    response.subdivisions.most_specific.name = region_name
    response.postal.code = "33101"
    response.location.latitude = 25.7743
    response.location.longitude = -80.1937
    response.location.time_zone = time_zone
    response.location.metro_code = 528
    return response


@pytest.fixture
def maxmind():
    provider = MaxMindProvider("/nonexistent/GeoLite2-City.mmdb")
    reader = MagicMock()
    reader.city.return_value = _city_response()
    provider._reader = reader
    provider.loaded = True
    return provider


class TestMaxMindProvider:

    def test_init(self):
        provider = MaxMindProvider("/data/geo/GeoLite2-City.mmdb")
        assert provider.name == "maxmind"
        assert not provider.loaded

    def test_load_missing_file(self):
        provider = MaxMindProvider("/nonexistent/file.mmdb")

        assert provider.load() is False
        assert not provider.loaded
        with pytest.raises(ConfigurationError):
            provider.lookup_record("8.8.8.8")

    @patch("geofacade.providers.maxmind.geoip2.database.Reader")
    def test_load_success(self, mock_reader_cls, tmp_path):
        db = tmp_path / "GeoLite2-City.mmdb"
        db.write_bytes(b"")

        provider = MaxMindProvider(str(db))

        assert provider.load() is True
        assert provider.loaded
        assert provider.last_refresh > 0
        mock_reader_cls.assert_called_once_with(str(db))

    def test_lookup_record(self, maxmind):
        record = maxmind.lookup_record("8.8.8.8")

        assert record.city == "Miami"
        assert record.region == "FL"
        assert record.postal_code == "33101"
        assert record.latitude == 25.7743
        assert record.longitude == -80.1937
        assert record.area_code == 528

    def test_country_codes(self, maxmind):
        assert maxmind.lookup_country_code("8.8.8.8", 2) == "US"
        assert maxmind.lookup_country_code("8.8.8.8", 3) == "USA"
        assert maxmind.lookup_country_name("8.8.8.8") == "United States"
        assert maxmind.lookup_continent_code("8.8.8.8") == "NA"

    def test_region_and_timezone_from_seen_records(self, maxmind):
        maxmind.lookup_record("8.8.8.8")

        assert maxmind.lookup_region_name("US", "FL") == "Florida"
        assert maxmind.lookup_timezone("us", "FL") == "America/New_York"

    def test_timezone_keeps_first_zone_seen(self, maxmind):
        maxmind.lookup_record("8.8.8.8")
        maxmind._reader.city.return_value = _city_response(city="Pensacola", time_zone="America/Chicago")
        maxmind.lookup_record("8.8.4.4")

        assert maxmind.lookup_timezone("US", "FL") == "America/New_York"

    def test_region_name_falls_back_to_pycountry(self, maxmind):
        assert maxmind.lookup_region_name("US", "CA") == "California"
        assert maxmind.lookup_timezone("US", "CA") is None

    def test_address_not_found(self, maxmind):
        maxmind._reader.city.side_effect = geoip2.errors.AddressNotFoundError("not found")

        assert maxmind.lookup_record("10.0.0.1") is None
        assert maxmind.lookup_country_name("10.0.0.1") is None
        assert maxmind.lookup_country_code("10.0.0.1", 3) is None

    def test_invalid_ip_is_a_miss(self, maxmind):
        maxmind._reader.city.side_effect = ValueError("'nope' does not appear to be an IPv4 or IPv6 address")
        assert maxmind.lookup_record("nope") is None

    def test_geo_over_maxmind(self, maxmind):
        geo = Geo(maxmind, GeoContext(ip="8.8.8.8"))

        assert geo.get_formatted() == "Miami, Florida"
        assert geo.get_timezone() == "America/New_York"
        assert geo.get_country_code() == "USA"

    def test_close(self, maxmind):
        reader = maxmind._reader
        maxmind.close()

        reader.close.assert_called_once()
        assert not maxmind.loaded


class TestStaticProvider:

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "geo.yaml"
        path.write_text(
            "records:\n"
            "  203.0.113.5:\n"
            "    city: Miami\n"
            "    region: FL\n"
            "    country: United States\n"
            "    country_code: US\n"
            "regions:\n"
            "  us: {FL: Florida}\n"
        )
        provider = StaticProvider(path=str(path))

        assert provider.load() is True
        assert provider.get_status()["records"] == 1
        assert provider.lookup_record("203.0.113.5").city == "Miami"
        assert provider.lookup_country_code("203.0.113.5", 3) == "USA"
        assert provider.lookup_region_name("US", "FL") == "Florida"
        assert provider.lookup_record("192.0.2.1") is None

    def test_load_missing_file(self):
        provider = StaticProvider(path="/nonexistent/geo.yaml")
        assert provider.load() is False
        assert provider.get_status()["status"] == "missing"

    def test_rejects_non_mapping(self):
        with pytest.raises(ConfigurationError):
            StaticProvider(data=["203.0.113.5"]).load()


class TestBuildProvider:

    def test_demo(self):
        provider = build_provider("maxmind", demo=True)
        assert provider.name == "static"
        assert provider.loaded

    def test_missing_database_fails_fast(self):
        with pytest.raises(ConfigurationError):
            build_provider("maxmind", db_path="/nonexistent/file.mmdb")

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            build_provider("ipinfo")


class TestProviderSwap:

    def teardown_method(self):
        providers.close_retired()
        providers.set_provider(None)

    def test_replaced_provider_stays_open_until_retired(self):
        old = build_provider("static", demo=True)
        new = build_provider("static", demo=True)
        providers.set_provider(old)

        providers.replace_provider(new)

        assert providers.get_provider() is new
        assert old.loaded
        providers.close_retired()
        assert not old.loaded
        assert new.loaded

    def test_replacing_with_same_provider_keeps_it_open(self):
        provider = StaticProvider(data=DEMO_DATA)
        provider.load()
        providers.set_provider(provider)

        providers.replace_provider(provider)
        providers.close_retired()

        assert provider.loaded
