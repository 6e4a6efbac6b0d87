"""FastAPI wrapper for the CityPulse pipeline."""

from __future__ import annotations

import logging
import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from city_pulse import __version__
from city_pulse.config import CityPulseConfig
from city_pulse.geo import make_location
from city_pulse.pipeline import InvalidLocationError, QueryGuard, run_query

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Store startup state for the /health endpoint."""
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.last_run = None
    application.state.query_count = 0
    application.state.stats_lock = threading.Lock()
    application.state.guard = QueryGuard()
    yield


app = FastAPI(
    title="CityPulse API",
    description="Urban health vitals from air quality, seismic and weather data.",
    version=__version__,
    lifespan=lifespan,
)


def _record_query() -> None:
    """Stamp the last run and bump the query counter; endpoints run on a thread pool."""
    with app.state.stats_lock:
        app.state.last_run = datetime.now(tz=timezone.utc)
        app.state.query_count += 1


@app.get("/health")
def health() -> dict[str, Any]:
    """Server health check with uptime, version, and query count."""
    now = datetime.now(tz=timezone.utc)
    with app.state.stats_lock:
        last_run = app.state.last_run
        query_count = app.state.query_count
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - app.state.start_time).total_seconds(), 1),
        "last_run": last_run.isoformat() if last_run else None,
        "query_count": query_count,
    }


@app.get("/vitals")
def get_vitals(
    lat: Annotated[float, Query(ge=-90.0, le=90.0, description="Latitude in degrees.")],
    lon: Annotated[float, Query(ge=-180.0, le=180.0, description="Longitude in degrees.")],
    mock: Annotated[bool, Query(description="Use mock data instead of upstream APIs.")] = False,
    geocode: Annotated[bool, Query(description="Resolve the nearest city offline.")] = False,
) -> JSONResponse:
    """Compute vitals, diagnosis and data-quality report for one coordinate.

    Upstream failures degrade to default values; the response reports them
    in ``source_errors`` and ``all_sources_failed``.
    """
    config = CityPulseConfig(use_mock_data=True) if mock else CityPulseConfig()
    guard: QueryGuard = app.state.guard
    request_id = guard.begin()

    try:
        result = run_query(make_location(lat, lon, geocode=geocode), config)
    except InvalidLocationError as exc:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    _record_query()

    content = asdict(result)
    guard.commit(request_id, content)
    return JSONResponse(content=content)


@app.get("/vitals/latest")
def get_latest_vitals() -> JSONResponse:
    """Result of the most recently started query, once it has completed."""
    latest = app.state.guard.value
    if latest is None:
        return JSONResponse(status_code=404, content={"detail": "No completed query yet"})
    return JSONResponse(content=latest)
