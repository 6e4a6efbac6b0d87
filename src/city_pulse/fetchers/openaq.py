"""OpenAQ latest-measurements fetcher."""

from __future__ import annotations

import logging

from requests import Session

from city_pulse.config import OPENAQ_BASE
from city_pulse.http import UpstreamError, create_session, get_json

logger = logging.getLogger(__name__)

SERVICE = "air_quality"


def fetch_air_quality(
    lat: float,
    lon: float,
    radius_m: int = 10000,
    timeout: float = 10.0,
    base_url: str = OPENAQ_BASE,
    session: Session | None = None,
) -> dict:
    """Fetch the latest station measurements within *radius_m* of (lat, lon).

    Raises:
        UpstreamError: with a classified message on any HTTP or network failure.
    """
    if session is None:
        session = create_session()

    params = {"coordinates": f"{lat},{lon}", "radius": radius_m, "limit": 100}
    try:
        data = get_json(
            session, f"{base_url}/latest", params, timeout,
            SERVICE, "air quality service",
        )
    except UpstreamError as exc:
        logger.warning("Air quality API error: %s", exc)
        raise
    logger.debug("OpenAQ returned %d stations", len(data.get("results") or []))
    return data
