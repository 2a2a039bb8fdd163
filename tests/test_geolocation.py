"""Validate location capture and the IP geolocation provider."""

import httpx
import pytest

from shop_console.exceptions import LocationUnavailableError
from shop_console.geolocation import (
    STATUS_CAPTURED,
    STATUS_DETECTING,
    STATUS_FAILED,
    STATUS_UNSUPPORTED,
    Coordinates,
    IpLocationProvider,
    LocationCapture,
)


def provider_for(handler):
    return IpLocationProvider("http://geo.test/json", transport=httpx.MockTransport(handler))


class TestIpLocationProvider:
    def test_reads_lat_lon(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"status": "success", "lat": 51.5, "lon": -0.12}))

        assert provider.locate(10.0) == Coordinates(51.5, -0.12)

    def test_reads_latitude_longitude(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"latitude": 40.7, "longitude": -74.0}))

        assert provider.locate(10.0) == Coordinates(40.7, -74.0)

    def test_refused_lookup(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"status": "fail", "message": "private range"}))

        with pytest.raises(LocationUnavailableError):
            provider.locate(10.0)

    @pytest.mark.parametrize("lat", ["n/a", [51.5], {"deg": 51}])
    def test_non_numeric_coordinates(self, lat):
        provider = provider_for(lambda request: httpx.Response(200, json={"status": "success", "lat": lat, "lon": 1}))

        with pytest.raises(LocationUnavailableError):
            provider.locate(10.0)

    def test_http_error(self):
        provider = provider_for(lambda request: httpx.Response(503))

        with pytest.raises(LocationUnavailableError):
            provider.locate(10.0)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LocationUnavailableError):
            provider_for(handler).locate(10.0)


class FakeProvider:
    def __init__(self, results):
        self.results = list(results)
        self.timeouts = []

    def locate(self, timeout):
        self.timeouts.append(timeout)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestLocationCapture:
    def test_initial_status(self):
        capture = LocationCapture(FakeProvider([]))

        assert capture.status == STATUS_DETECTING
        assert capture.latitude is None

    def test_unsupported_without_provider(self):
        capture = LocationCapture(None)

        assert capture.capture() is None
        assert capture.status == STATUS_UNSUPPORTED

    def test_success(self):
        provider = FakeProvider([Coordinates(1.5, 2.5)])
        capture = LocationCapture(provider, timeout=10.0)

        capture.capture()

        assert capture.status == STATUS_CAPTURED
        assert (capture.latitude, capture.longitude) == (1.5, 2.5)
        assert provider.timeouts == [10.0]

    def test_invalid_reply_sets_failed_status(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"status": "success", "lat": "n/a", "lon": 1}))
        capture = LocationCapture(provider)

        assert capture.capture() is None

        assert capture.coordinates is None
        assert capture.status == STATUS_FAILED

    def test_failed_refresh_keeps_previous_coordinates(self):
        capture = LocationCapture(FakeProvider([Coordinates(1.5, 2.5), LocationUnavailableError("denied")]))
        capture.capture()

        assert capture.capture() is None

        assert capture.status == STATUS_FAILED
        assert capture.coordinates == Coordinates(1.5, 2.5)
