"""Reverse geocoding for Photo Renamer.

Uses the OpenStreetMap Nominatim API, which allows at most one request
per second and requires an identifying User-Agent.
"""

import logging
import threading
import time
from typing import Any, Dict, Optional

import requests

from photorenamer import __version__
from photorenamer.core.models import LocationInfo

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_USER_AGENT = f"PhotoRenamer/{__version__} (photo renaming tool)"

# Most specific first
CITY_FIELDS = ("suburb", "neighbourhood", "city", "town", "village", "hamlet", "county")


def location_from_response(data: Dict[str, Any]) -> Optional[LocationInfo]:
    """Build LocationInfo from a Nominatim JSON response.

    Returns:
        LocationInfo, or None if the response has no address.
    """
    address = data.get("address") if isinstance(data, dict) else None
    if not address:
        return None

    city = None
    for key in CITY_FIELDS:
        if address.get(key):
            city = address[key]
            break

    return LocationInfo(
        city=city,
        state=address.get("state"),
        country=address.get("country"),
        formatted_address=data.get("display_name"),
    )


def fallback_location(latitude: float, longitude: float) -> LocationInfo:
    """LocationInfo holding only the coordinates (short_name is 'Unknown')."""
    return LocationInfo(formatted_address=f"{latitude:.4f}, {longitude:.4f}")


class NominatimGeocoder:
    """Thread-safe reverse geocoder with caching and rate limiting.

    Lookups for coordinates that round to the same 4 decimal places
    (about 11 m) share a cache entry. Failed lookups are not cached.

    Usage:
        geocoder = NominatimGeocoder()
        info = geocoder.reverse_lookup(48.8584, 2.2945)
        print(info.short_name)
    """

    MIN_REQUEST_INTERVAL = 1.0  # seconds, per Nominatim usage policy
    DEFAULT_TIMEOUT = 10

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        min_interval: float = MIN_REQUEST_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        url: str = NOMINATIM_URL
    ):
        """Initialize geocoder.

        Args:
            user_agent: User-Agent header sent with every request.
            min_interval: Minimum seconds between requests.
            timeout: Request timeout in seconds.
            session: Optional requests session (e.g. for testing).
            url: Reverse geocoding endpoint.
        """
        self.min_interval = min_interval
        self.timeout = timeout
        self.url = url
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})
        self._cache: Dict[str, LocationInfo] = {}
        self._lock = threading.Lock()
        self._last_request = 0.0

    @staticmethod
    def _cache_key(latitude: float, longitude: float) -> str:
        return f"{round(latitude, 4)},{round(longitude, 4)}"

    def reverse_lookup(self, latitude: float, longitude: float) -> Optional[LocationInfo]:
        """Look up the place at the given coordinates.

        Network and API errors are not raised; they produce a fallback
        LocationInfo whose short_name is "Unknown".

        Args:
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.

        Returns:
            LocationInfo for the coordinates.
        """
        key = self._cache_key(latitude, longitude)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            self._wait_for_rate_limit()

            try:
                response = self._session.get(
                    self.url,
                    params={
                        "format": "json",
                        "lat": latitude,
                        "lon": longitude,
                        "zoom": 16,
                        "addressdetails": 1,
                    },
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.debug(f"Reverse geocoding request failed for {key}: {e}")
                return fallback_location(latitude, longitude)
            finally:
                self._last_request = time.monotonic()

            if response.status_code != 200:
                logger.debug(f"Reverse geocoding returned HTTP {response.status_code} for {key}")
                return fallback_location(latitude, longitude)

            try:
                info = location_from_response(response.json())
            except ValueError as e:
                logger.debug(f"Invalid reverse geocoding response for {key}: {e}")
                return fallback_location(latitude, longitude)

            if info is None:
                return fallback_location(latitude, longitude)

            self._cache[key] = info
            return info

    def _wait_for_rate_limit(self) -> None:
        elapsed = time.monotonic() - self._last_request
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def cache_count(self) -> int:
        """Number of cached locations."""
        return len(self._cache)

    def close(self) -> None:
        self._session.close()
