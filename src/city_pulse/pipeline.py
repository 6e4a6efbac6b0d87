"""Pipeline orchestrator: validate -> fetch -> assemble -> diagnose -> check."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from requests import Session

from city_pulse.assembler import RawInput, compute_vitals
from city_pulse.config import CityPulseConfig
from city_pulse.diagnostics import apply_diagnosis, diagnose
from city_pulse.fetchers.openaq import fetch_air_quality
from city_pulse.fetchers.openweather import fetch_weather
from city_pulse.fetchers.usgs import fetch_earthquakes
from city_pulse.http import create_session
from city_pulse.mock_data import generate_mock_vitals
from city_pulse.models import (
    CityVitals,
    DataQualityReport,
    DiagnosticResult,
    LocationData,
    ValidationResult,
)
from city_pulse.validator import (
    generate_quality_report,
    validate_api_response,
    validate_city_vitals,
    validate_location,
)

logger = logging.getLogger(__name__)

SOURCES = ("air_quality", "earthquake", "weather")


class InvalidLocationError(ValueError):
    """The queried coordinate failed location validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Invalid location data: {', '.join(errors)}")
        self.errors = errors


@dataclass
class SourceResults:
    """Outcome of each provider fetch: the raw JSON, the raised exception, or None."""

    air_quality: RawInput = None
    earthquake: RawInput = None
    weather: RawInput = None

    def outcomes(self) -> dict[str, RawInput]:
        return {name: getattr(self, name) for name in SOURCES}

    def errors(self) -> dict[str, str]:
        return {
            name: str(outcome)
            for name, outcome in self.outcomes().items()
            if isinstance(outcome, BaseException)
        }

    @property
    def all_failed(self) -> bool:
        return len(self.errors()) == len(SOURCES)


@dataclass
class QueryResult:
    """Everything one location query produced."""

    location: LocationData
    vitals: CityVitals
    diagnostic: DiagnosticResult
    validation: ValidationResult
    quality: DataQualityReport
    source_errors: dict[str, str] = field(default_factory=dict)
    all_sources_failed: bool = False


def fetch_sources(
    location: LocationData,
    config: CityPulseConfig,
    session: Session | None = None,
) -> SourceResults:
    """Fetch all three providers concurrently and wait for every outcome.

    A failing provider never cancels the others; its exception is stored
    in its slot instead of a response.
    """
    if session is None:
        session = create_session()

    fetchers: dict[str, Callable[[], dict]] = {
        "air_quality": partial(
            fetch_air_quality,
            location.lat,
            location.lon,
            radius_m=config.air_quality_radius_m,
            timeout=config.request_timeout,
            base_url=config.openaq_base_url,
            session=session,
        ),
        "earthquake": partial(
            fetch_earthquakes,
            location.lat,
            location.lon,
            radius_deg=config.seismic_radius_deg,
            min_magnitude=config.seismic_min_magnitude,
            days_lookback=config.seismic_days_lookback,
            timeout=config.request_timeout,
            base_url=config.usgs_base_url,
            session=session,
        ),
        "weather": partial(
            fetch_weather,
            location.lat,
            location.lon,
            api_key=config.openweather_api_key,
            timeout=config.request_timeout,
            base_url=config.openweather_base_url,
            session=session,
        ),
    }

    outcomes: dict[str, RawInput] = {}
    with ThreadPoolExecutor(max_workers=len(fetchers)) as pool:
        futures = {name: pool.submit(fn) for name, fn in fetchers.items()}
        for name, future in futures.items():
            try:
                outcomes[name] = future.result()
            except Exception as exc:
                outcomes[name] = exc

    return SourceResults(**outcomes)


def _log_raw_validation(sources: SourceResults) -> None:
    for name, outcome in sources.outcomes().items():
        if not isinstance(outcome, dict):
            continue
        check = validate_api_response(name, outcome)
        for error in check.errors:
            logger.warning("%s response error: %s", name, error)
        for warning in check.warnings:
            logger.debug("%s response warning: %s", name, warning)


def run_query(
    location: LocationData,
    config: CityPulseConfig,
    session: Session | None = None,
    rng: random.Random | None = None,
) -> QueryResult:
    """Run one location query end to end.

    Steps:
    1. Validate the location (raises InvalidLocationError)
    2. Fetch the three providers concurrently, or generate mock vitals
    3. Assemble vitals, substituting defaults for failed providers
    4. Diagnose and attach the overall health
    5. Validate the vitals and build the data-quality report (advisory)
    """
    # Step 1: Validate location
    location_check = validate_location(location)
    if not location_check.is_valid:
        raise InvalidLocationError(location_check.errors)
    for warning in location_check.warnings:
        logger.warning("Location: %s", warning)

    # Steps 2-3: Fetch and assemble
    if config.use_mock_data:
        logger.info("Generating mock vitals for (%.4f, %.4f)", location.lat, location.lon)
        sources = SourceResults()
        vitals = generate_mock_vitals(location, rng=rng)
    else:
        logger.info("Fetching city data for (%.4f, %.4f)...", location.lat, location.lon)
        sources = fetch_sources(location, config, session=session)
        _log_raw_validation(sources)
        if sources.all_failed:
            logger.error("All upstream sources failed: %s", sources.errors())
        vitals = compute_vitals(
            location,
            air_quality_raw=sources.air_quality,
            seismic_raw=sources.earthquake,
            weather_raw=sources.weather,
            rng=rng,
        )

    # Step 4: Diagnose
    diagnostic = diagnose(vitals)
    vitals = apply_diagnosis(vitals, diagnostic)
    logger.info(
        "Overall score %d (%s severity)", diagnostic.overall_score, diagnostic.severity
    )

    # Step 5: Advisory validation
    validation = validate_city_vitals(vitals)
    if not validation.is_valid:
        logger.warning("Vitals validation issues: %s", validation.errors)
    quality = generate_quality_report(vitals)
    logger.debug("Data quality score: %d", quality.overall_score)

    return QueryResult(
        location=location,
        vitals=vitals,
        diagnostic=diagnostic,
        validation=validation,
        quality=quality,
        source_errors=sources.errors(),
        all_sources_failed=sources.all_failed,
    )


class QueryGuard:
    """Drops results of superseded queries.

    Each query takes an id from ``begin()``; ``commit()`` keeps a result
    only if no newer query has started since, so a slow response for an
    old location cannot overwrite a newer one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest_id = 0
        self._value: Any = None

    def begin(self) -> int:
        with self._lock:
            self._latest_id += 1
            return self._latest_id

    def is_current(self, request_id: int) -> bool:
        with self._lock:
            return request_id == self._latest_id

    def commit(self, request_id: int, value: Any) -> bool:
        with self._lock:
            if request_id != self._latest_id:
                logger.debug(
                    "Discarding stale result %d (latest %d)", request_id, self._latest_id
                )
                return False
            self._value = value
            return True

    @property
    def value(self) -> Any:
        with self._lock:
            return self._value
