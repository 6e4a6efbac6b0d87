"""USGS earthquake data fetcher."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from requests import Session

from city_pulse.config import USGS_BASE
from city_pulse.http import UpstreamError, create_session, get_json

logger = logging.getLogger(__name__)

SERVICE = "earthquake"


def fetch_earthquakes(
    lat: float,
    lon: float,
    radius_deg: float = 1.0,
    min_magnitude: float = 2.5,
    days_lookback: int = 30,
    timeout: float = 10.0,
    base_url: str = USGS_BASE,
    session: Session | None = None,
) -> dict:
    """Fetch recent earthquakes inside a bounding box around (lat, lon).

    The box spans *radius_deg* degrees in each direction (1 degree is
    roughly 100 km). Returns the raw GeoJSON FeatureCollection.

    Raises:
        UpstreamError: with a classified message on any HTTP or network failure.
    """
    if session is None:
        session = create_session()

    end_time = datetime.now(timezone.utc)
    start_time = end_time - timedelta(days=days_lookback)

    params: dict[str, str | float | int] = {
        "format": "geojson",
        "starttime": start_time.isoformat(),
        "endtime": end_time.isoformat(),
        "minlatitude": lat - radius_deg,
        "maxlatitude": lat + radius_deg,
        "minlongitude": lon - radius_deg,
        "maxlongitude": lon + radius_deg,
        "minmagnitude": min_magnitude,
        "limit": 50,
    }
    try:
        data = get_json(
            session, f"{base_url}/query", params, timeout,
            SERVICE, "earthquake service",
        )
    except UpstreamError as exc:
        logger.warning("Earthquake API error: %s", exc)
        raise
    logger.debug("USGS returned %d features", len(data.get("features") or []))
    return data
