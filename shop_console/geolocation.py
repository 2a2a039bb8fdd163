"""
One-shot current-location capture for shop registration.

The console runs server-side, so the default provider asks an IP
geolocation service. Any provider with a locate(timeout) method will do.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
import structlog

from shop_console.exceptions import LocationUnavailableError

logger = structlog.get_logger(__name__)

STATUS_DETECTING = "Detecting current location..."
STATUS_FETCHING = "Fetching current location..."
STATUS_CAPTURED = "Location captured from your device."
STATUS_FAILED = "Unable to capture location. Please allow location access and try again."
STATUS_UNSUPPORTED = "Geolocation is not supported by this browser."

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


class LocationProvider(Protocol):
    def locate(self, timeout: float) -> Coordinates: ...


class IpLocationProvider:
    """Looks up coordinates from a JSON geolocation endpoint such as ip-api.com."""

    def __init__(self, url: str, transport: Optional[httpx.BaseTransport] = None):
        self.url = url
        self.transport = transport

    def locate(self, timeout: float) -> Coordinates:
        try:
            with httpx.Client(timeout=timeout, transport=self.transport) as client:
                response = client.get(self.url)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LocationUnavailableError("Location lookup failed", details={"error": str(e)}) from e

        if not isinstance(body, dict) or body.get("status", "success") != "success":
            raise LocationUnavailableError("Location lookup refused", details={"body": body})

        lat = body.get("lat", body.get("latitude"))
        lon = body.get("lon", body.get("longitude"))
        if lat is None or lon is None:
            raise LocationUnavailableError("Location lookup returned no coordinates")
        try:
            return Coordinates(float(lat), float(lon))
        except (TypeError, ValueError) as e:
            raise LocationUnavailableError(
                "Location lookup returned invalid coordinates", details={"lat": lat, "lon": lon}
            ) from e


class LocationCapture:
    """Holds the captured coordinates and the status line shown under them."""

    def __init__(self, provider: Optional[LocationProvider], timeout: float = DEFAULT_TIMEOUT):
        self.provider = provider
        self.timeout = timeout
        self.coordinates: Optional[Coordinates] = None
        self.status = STATUS_DETECTING

    @property
    def latitude(self) -> Optional[float]:
        return self.coordinates.latitude if self.coordinates else None

    @property
    def longitude(self) -> Optional[float]:
        return self.coordinates.longitude if self.coordinates else None

    def capture(self) -> Optional[Coordinates]:
        """Ask the provider once. A failure leaves the coordinates as they were."""
        if self.provider is None:
            self.status = STATUS_UNSUPPORTED
            return None

        self.status = STATUS_FETCHING
        try:
            self.coordinates = self.provider.locate(self.timeout)
        except LocationUnavailableError as e:
            logger.warning("Geolocation error", error=e.message, **e.details)
            self.status = STATUS_FAILED
            return None

        self.status = STATUS_CAPTURED
        return self.coordinates
