"""Vitals assembler: merge normalized metrics into one CityVitals record."""

from __future__ import annotations

import logging
import random

from city_pulse.models import (
    BloodOxygen,
    CityVitals,
    Fallback,
    HeartRate,
    ImmuneSystem,
    Infections,
    LocationData,
    Pollutants,
    Synthetic,
    Temperature,
)
from city_pulse.normalizers import normalize_air_quality, normalize_seismic, normalize_weather

logger = logging.getLogger(__name__)

# Ranges for signals that have no upstream source wired in.
HEART_RATE_RANGE = (60, 99)
GREEN_SPACE_RANGE = (10, 39)
NDVI_RANGE = (0.2, 1.0)

RawInput = dict | BaseException | None


def default_air_quality(reason: str) -> BloodOxygen:
    return BloodOxygen(
        value=0.0,
        pollutants=Pollutants(),
        status="healthy",
        trend="stable",
        description="Air quality data unavailable.",
        source=Fallback("openaq", reason),
    )


def default_infections(reason: str) -> Infections:
    return Infections(
        disaster_events=0,
        pollution_hotspots=0,
        status="clean",
        description="No recent natural disasters detected.",
        source=Fallback("usgs", reason),
    )


def default_temperature(reason: str) -> Temperature:
    return Temperature(
        value=20.0,
        heat_island_effect=0.0,
        status="normal",
        trend="stable",
        description="Temperature data unavailable.",
        source=Fallback("openweathermap", reason),
    )


def synthesize_heart_rate(rng: random.Random) -> HeartRate:
    low, high = HEART_RATE_RANGE
    return HeartRate(
        value=float(rng.randint(low, high)),
        status="normal",
        trend="stable",
        description="Urban activity levels are normal based on nighttime light intensity.",
        source=Synthetic("uniform", low, high),
    )


def synthesize_immune_system(rng: random.Random) -> ImmuneSystem:
    low, high = GREEN_SPACE_RANGE
    ndvi_low, ndvi_high = NDVI_RANGE
    return ImmuneSystem(
        green_space_coverage=float(rng.randint(low, high)),
        ndvi=rng.uniform(ndvi_low, ndvi_high),
        status="strong",
        trend="stable",
        description="Vegetation coverage and health are within normal ranges.",
        source=Synthetic("uniform", low, high),
    )


def _normalize(name, raw: RawInput, normalize, default):
    """Run *normalize* on *raw*, substituting *default* for absent/failed/unparseable input."""
    if raw is None:
        return default("not fetched")
    if isinstance(raw, BaseException):
        logger.warning("%s source failed: %s", name, raw)
        return default(str(raw) or type(raw).__name__)
    try:
        return normalize(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Could not normalize %s response: %r", name, exc)
        return default(f"Malformed response: {exc!r}")


def compute_vitals(
    location: LocationData,
    air_quality_raw: RawInput = None,
    seismic_raw: RawInput = None,
    weather_raw: RawInput = None,
    *,
    rng: random.Random | None = None,
    now_ms: int | None = None,
) -> CityVitals:
    """Assemble the five vitals categories for *location*.

    Each raw input may be the provider's JSON dict, ``None`` (not fetched)
    or the exception raised by the fetch. Failed or malformed inputs are
    replaced by neutral defaults tagged ``Fallback``; heart rate and immune
    system are always ``Synthetic``. Never raises for bad upstream data.
    ``overall_health`` is left as the zero-valued placeholder.
    """
    if rng is None:
        rng = random.Random()

    logger.debug("Assembling vitals for (%.4f, %.4f)", location.lat, location.lon)
    blood_oxygen = _normalize(
        "air quality", air_quality_raw, normalize_air_quality, default_air_quality
    )
    infections = _normalize(
        "earthquake",
        seismic_raw,
        lambda raw: normalize_seismic(raw, now_ms=now_ms),
        default_infections,
    )
    temperature = _normalize("weather", weather_raw, normalize_weather, default_temperature)

    return CityVitals(
        heart_rate=synthesize_heart_rate(rng),
        temperature=temperature,
        blood_oxygen=blood_oxygen,
        immune_system=synthesize_immune_system(rng),
        infections=infections,
    )
