"""Location construction and offline reverse geocoding."""

from __future__ import annotations

import logging
import time

import reverse_geocoder as rg

from city_pulse.models import LocationData

logger = logging.getLogger(__name__)


def reverse_geocode(lat: float, lon: float) -> tuple[str | None, str | None]:
    """Return (city, country_code) for the nearest populated place."""
    try:
        match = rg.search([(lat, lon)], mode=1)[0]
    except (IndexError, ValueError):
        logger.warning("Reverse geocoding failed for (%.4f, %.4f)", lat, lon, exc_info=True)
        return None, None
    return match.get("name") or None, match.get("cc") or None


def make_location(
    lat: float,
    lon: float,
    timestamp: int | None = None,
    geocode: bool = False,
) -> LocationData:
    """Build a LocationData stamped with the current time (epoch ms).

    With *geocode*, city and country are filled from the offline
    GeoNames index shipped with ``reverse_geocoder``.
    """
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    city = country = None
    if geocode and -90 <= lat <= 90 and -180 <= lon <= 180:
        city, country = reverse_geocode(lat, lon)
    return LocationData(lat=lat, lon=lon, timestamp=timestamp, city=city, country=country)
