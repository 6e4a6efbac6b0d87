"""Per-source normalizers: raw provider JSON -> bounded vitals metrics.

Statuses and trends are derived from the current sample only. The trend
values are heuristics, not a comparison against historical data.
"""

from __future__ import annotations

import time
from collections.abc import Iterable

from city_pulse.models import (
    ActivityTrend,
    AirQualityStatus,
    AirQualityTrend,
    BloodOxygen,
    Infections,
    InfectionStatus,
    Measured,
    Pollutants,
    Temperature,
    TemperatureStatus,
)
from city_pulse.validator import is_number

AQI_MIN, AQI_MAX = 0.0, 500.0
TEMPERATURE_MIN, TEMPERATURE_MAX = -90.0, 60.0
SEISMIC_WINDOW_DAYS = 30

_DAY_MS = 24 * 60 * 60 * 1000


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Air quality (OpenAQ)
# ---------------------------------------------------------------------------


def average_measurement(measurements: Iterable[dict], parameter: str) -> float:
    """Mean of all numeric values reported for *parameter*; 0.0 if none."""
    values = [
        m["value"]
        for m in measurements
        if m.get("parameter") == parameter and is_number(m.get("value"))
    ]
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_aqi(pm25: float) -> float:
    """EPA-style piecewise-linear AQI keyed on PM2.5 (ug/m3)."""
    if pm25 <= 12:
        return max(0.0, (pm25 / 12) * 50)
    if pm25 <= 35.4:
        return 50 + ((pm25 - 12) / 23.4) * 50
    if pm25 <= 55.4:
        return 100 + ((pm25 - 35.4) / 20) * 50
    if pm25 <= 150.4:
        return 150 + ((pm25 - 55.4) / 95) * 100
    if pm25 <= 250.4:
        return 250 + ((pm25 - 150.4) / 100) * 100
    return min(AQI_MAX, 350 + ((pm25 - 250.4) / 149.6) * 150)


def determine_air_quality_status(aqi: float) -> AirQualityStatus:
    if aqi <= 50:
        return "healthy"
    if aqi <= 150:
        return "unhealthy"
    return "hazardous"


def determine_air_quality_trend(pollutants: Pollutants) -> AirQualityTrend:
    avg = pollutants.mean
    if avg < 10:
        return "improving"
    if avg > 30:
        return "worsening"
    return "stable"


def describe_air_quality(aqi: float, status: AirQualityStatus) -> str:
    verdict = "Good air quality." if status == "healthy" else "Air quality concerns detected."
    return f"Air quality index: {aqi:.0f}. {verdict}"


def normalize_air_quality(response: dict, provider: str = "openaq") -> BloodOxygen:
    """Aggregate every nearby station into one air-quality metric.

    No stations means clean air: AQI 0, ``healthy``, ``stable``.
    """
    results = response.get("results") or []
    if not results:
        return BloodOxygen(
            value=0.0,
            pollutants=Pollutants(),
            status="healthy",
            trend="stable",
            description="No air quality stations found nearby.",
            source=Measured(provider),
        )

    measurements = [m for r in results for m in (r.get("measurements") or [])]

    pollutants = Pollutants(
        no2=max(0.0, average_measurement(measurements, "no2")),
        pm25=max(0.0, average_measurement(measurements, "pm25")),
        o3=max(0.0, average_measurement(measurements, "o3")),
    )
    aqi = clamp(calculate_aqi(pollutants.pm25), AQI_MIN, AQI_MAX)
    status = determine_air_quality_status(aqi)

    return BloodOxygen(
        value=aqi,
        pollutants=pollutants,
        status=status,
        trend=determine_air_quality_trend(pollutants),
        description=describe_air_quality(aqi, status),
        source=Measured(provider),
    )


# ---------------------------------------------------------------------------
# Seismic (USGS)
# ---------------------------------------------------------------------------


def filter_recent_events(
    features: Iterable[dict],
    now_ms: int | None = None,
    window_days: int = SEISMIC_WINDOW_DAYS,
) -> list[dict]:
    """Keep features whose ``properties.time`` is within the last *window_days*."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    recent = []
    for feat in features:
        event_time = (feat.get("properties") or {}).get("time")
        if not is_number(event_time):
            continue
        if (now_ms - event_time) / _DAY_MS <= window_days:
            recent.append(feat)
    return recent


def determine_infection_status(disaster_events: int) -> InfectionStatus:
    if disaster_events == 0:
        return "clean"
    if disaster_events <= 2:
        return "infected"
    return "critical"


def describe_disasters(disaster_events: int) -> str:
    if disaster_events == 0:
        return "No recent natural disasters detected in the area."
    if disaster_events <= 2:
        return f"Low disaster activity: {disaster_events} earthquake(s) in the last 30 days."
    return f"High disaster activity: {disaster_events} earthquake(s) in the last 30 days."


def normalize_seismic(
    response: dict,
    now_ms: int | None = None,
    provider: str = "usgs",
) -> Infections:
    """Count recent earthquakes; magnitude is not weighted."""
    recent = filter_recent_events(response.get("features") or [], now_ms=now_ms)
    count = len(recent)
    return Infections(
        disaster_events=count,
        # earthquakes carry no pollution signal
        pollution_hotspots=0,
        status=determine_infection_status(count),
        description=describe_disasters(count),
        source=Measured(provider),
    )


# ---------------------------------------------------------------------------
# Weather (OpenWeatherMap)
# ---------------------------------------------------------------------------


def estimate_heat_island_effect(temperature: float) -> float:
    """Urban heat-island delta estimated from absolute temperature alone."""
    if temperature > 35:
        return 5.0
    if temperature > 30:
        return 3.0
    if temperature > 25:
        return 1.5
    if temperature > 20:
        return 0.5
    return 0.0


def determine_temperature_status(temperature: float) -> TemperatureStatus:
    if temperature > 40:
        return "critical"
    if temperature > 35:
        return "fever"
    return "normal"


def determine_temperature_trend(temperature: float) -> ActivityTrend:
    if temperature > 30:
        return "increasing"
    if temperature < 15:
        return "decreasing"
    return "stable"


def describe_temperature(
    temperature: float, heat_island: float, status: TemperatureStatus
) -> str:
    description = f"Current temperature: {temperature:.1f}°C"
    if heat_island > 3:
        description += (
            f". Strong urban heat island effect detected "
            f"(+{heat_island:.1f}°C above surrounding areas)."
        )
    elif heat_island > 1:
        description += f". Moderate heat island effect (+{heat_island:.1f}°C)."
    else:
        description += ". Minimal heat island effect."

    if status == "critical":
        description += " CRITICAL: Extreme heat conditions require immediate attention."
    elif status == "fever":
        description += " Elevated temperatures detected - heat management needed."
    return description


def normalize_weather(response: dict, provider: str = "openweathermap") -> Temperature:
    """Build the temperature metric from ``main.temp`` (Celsius).

    Raises:
        KeyError, TypeError: if ``main.temp`` is missing.
        ValueError: if ``main.temp`` is not a number.
    """
    raw = response["main"]["temp"]
    if not is_number(raw):
        raise ValueError(f"Invalid temperature: {raw!r}")

    temperature = clamp(float(raw), TEMPERATURE_MIN, TEMPERATURE_MAX)
    heat_island = estimate_heat_island_effect(temperature)
    status = determine_temperature_status(temperature)
    return Temperature(
        value=temperature,
        heat_island_effect=heat_island,
        status=status,
        trend=determine_temperature_trend(temperature),
        description=describe_temperature(temperature, heat_island, status),
        source=Measured(provider),
    )
