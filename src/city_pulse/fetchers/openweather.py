"""OpenWeatherMap current-conditions fetcher."""

from __future__ import annotations

import logging

from requests import Session

from city_pulse.config import OPENWEATHER_BASE
from city_pulse.http import UpstreamError, create_session, get_json

logger = logging.getLogger(__name__)

SERVICE = "weather"


def fetch_weather(
    lat: float,
    lon: float,
    api_key: str,
    timeout: float = 10.0,
    base_url: str = OPENWEATHER_BASE,
    session: Session | None = None,
) -> dict:
    """Fetch current weather (metric units) for (lat, lon).

    Raises:
        UpstreamError: if no API key is configured, or with a classified
            message on any HTTP or network failure. A 401 is reported as an
            invalid API key.
    """
    if not api_key:
        raise UpstreamError(SERVICE, "OpenWeatherMap API key not configured")
    if session is None:
        session = create_session()

    params = {"lat": lat, "lon": lon, "appid": api_key, "units": "metric"}
    try:
        return get_json(
            session, f"{base_url}/weather", params, timeout,
            SERVICE, "weather service",
        )
    except UpstreamError as exc:
        if exc.status_code == 401:
            logger.warning("Weather API error: invalid API key")
            raise UpstreamError(SERVICE, "Invalid API key for OpenWeatherMap", 401) from exc
        logger.warning("Weather API error: %s", exc)
        raise
