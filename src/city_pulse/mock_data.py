"""Offline mock vitals: per-city baselines with one random jitter factor."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from city_pulse.models import (
    ActivityTrend,
    AirQualityTrend,
    BloodOxygen,
    CityVitals,
    GreenSpaceStatus,
    GreenSpaceTrend,
    HeartRate,
    HeartRateStatus,
    ImmuneSystem,
    Infections,
    InfectionStatus,
    LocationData,
    Pollutants,
    Synthetic,
    Temperature,
)
from city_pulse.normalizers import (
    clamp,
    describe_temperature,
    determine_air_quality_status,
    determine_temperature_status,
)

logger = logging.getLogger(__name__)

JITTER = 0.15
DEFAULT_CITY = "Los Angeles"
_MATCH_TOLERANCE_DEG = 0.1


@dataclass(frozen=True)
class CityBaseline:
    heart_rate: float
    temperature: float
    heat_island_effect: float
    air_quality: float
    pollutants: Pollutants
    green_space: float
    ndvi: float
    disasters: float
    pollution_hotspots: float


MOCK_LOCATIONS: dict[str, LocationData] = {
    "Los Angeles": LocationData(34.0522, -118.2437, 0, "Los Angeles", "USA"),
    "New York": LocationData(40.7128, -74.0060, 0, "New York", "USA"),
    "London": LocationData(51.5074, -0.1278, 0, "London", "UK"),
    "Tokyo": LocationData(35.6762, 139.6503, 0, "Tokyo", "Japan"),
    "Paris": LocationData(48.8566, 2.3522, 0, "Paris", "France"),
}

BASELINES: dict[str, CityBaseline] = {
    "Los Angeles": CityBaseline(75, 22, 3.5, 45, Pollutants(25, 15, 35), 25, 0.6, 1, 3),
    "New York": CityBaseline(85, 18, 4.2, 55, Pollutants(35, 20, 40), 20, 0.5, 0, 5),
    "London": CityBaseline(70, 15, 2.8, 35, Pollutants(20, 12, 25), 35, 0.7, 0, 2),
    "Tokyo": CityBaseline(90, 20, 5.1, 65, Pollutants(45, 25, 50), 15, 0.4, 2, 4),
    "Paris": CityBaseline(65, 16, 2.5, 30, Pollutants(15, 10, 20), 40, 0.8, 0, 1),
}


def match_city(location: LocationData) -> str:
    """Name of the known city within 0.1 degrees of *location*, else the default."""
    for name, known in MOCK_LOCATIONS.items():
        if (
            abs(location.lat - known.lat) < _MATCH_TOLERANCE_DEG
            and abs(location.lon - known.lon) < _MATCH_TOLERANCE_DEG
        ):
            return name
    return DEFAULT_CITY


def heart_rate_status(value: float) -> HeartRateStatus:
    if value <= 60:
        return "normal"
    if value <= 80:
        return "elevated"
    return "critical"


def green_space_status(coverage: float) -> GreenSpaceStatus:
    if coverage >= 30:
        return "strong"
    if coverage >= 15:
        return "weak"
    return "compromised"


def infection_status(disasters: float, hotspots: float) -> InfectionStatus:
    total = disasters + hotspots
    if total == 0:
        return "clean"
    if total <= 3:
        return "infected"
    return "critical"


def _describe_heart_rate(value: float) -> str:
    if value > 90:
        return (
            f"High urban activity detected ({value:.0f} bpm). The city's heartbeat is "
            "elevated, indicating intense urban activity."
        )
    if value > 70:
        return (
            f"Normal urban activity levels ({value:.0f} bpm). The city's heartbeat is "
            "steady and healthy."
        )
    return (
        f"Low urban activity detected ({value:.0f} bpm). The city's heartbeat is "
        "calm and relaxed."
    )


def _describe_air_quality(aqi: float) -> str:
    if aqi <= 50:
        return f"Excellent air quality (AQI: {aqi:.0f}). The city's air is clean and healthy."
    if aqi <= 100:
        return f"Good air quality (AQI: {aqi:.0f}). Minor air quality concerns."
    if aqi <= 150:
        return (
            f"Moderate air quality (AQI: {aqi:.0f}). Sensitive groups should take "
            "precautions."
        )
    return f"Poor air quality (AQI: {aqi:.0f}). Air quality is unhealthy for all residents."


def _describe_green_space(coverage: float) -> str:
    if coverage >= 30:
        return (
            f"Excellent green space coverage ({coverage:.0f}%). The city has a strong "
            "natural immune system."
        )
    if coverage >= 15:
        return (
            f"Moderate green space coverage ({coverage:.0f}%). The city's natural immune "
            "system needs strengthening."
        )
    return (
        f"Low green space coverage ({coverage:.0f}%). The city's natural immune system "
        "is compromised."
    )


def _describe_hazards(total: int) -> str:
    if total == 0:
        return "No recent environmental hazards detected. The city is clean and healthy."
    if total <= 2:
        return (
            f"Low environmental stress ({total} hazard(s) detected). Minor environmental "
            "concerns."
        )
    if total <= 5:
        return (
            f"Moderate environmental stress ({total} hazard(s) detected). Environmental "
            "monitoring needed."
        )
    return (
        f"High environmental stress ({total} hazard(s) detected). Immediate environmental "
        "intervention required."
    )


def generate_mock_vitals(location: LocationData, rng: random.Random | None = None) -> CityVitals:
    """Mock vitals for *location* without any network access.

    Baselines come from the nearest known city (Los Angeles when none
    matches). A single jitter factor in [-0.15, 0.15) scales every value;
    trends are drawn at random. Pass a seeded *rng* for reproducible output.
    """
    if rng is None:
        rng = random.Random()

    city = match_city(location)
    base = BASELINES[city]
    factor = rng.random() * 2 * JITTER - JITTER
    source = Synthetic(f"mock:{city}", -JITTER, JITTER)
    logger.debug("Mock vitals for %s (jitter %.3f)", city, factor)

    # statuses come from the jittered values before display rounding
    raw_heart_rate = base.heart_rate * (1 + factor)
    raw_temperature = base.temperature + factor * 5
    raw_aqi = base.air_quality * (1 + factor)
    raw_coverage = base.green_space * (1 + factor)
    raw_disasters = base.disasters + factor * 2
    raw_hotspots = base.pollution_hotspots + factor

    heart_rate = round(raw_heart_rate)

    temperature = round(raw_temperature, 1)
    heat_island = round(base.heat_island_effect + factor * 2, 1)
    temperature_status = determine_temperature_status(raw_temperature)

    aqi = clamp(round(raw_aqi), 0, 500)
    pollutants = Pollutants(
        no2=round(base.pollutants.no2 * (1 + factor * 0.5)),
        pm25=round(base.pollutants.pm25 * (1 + factor * 0.5)),
        o3=round(base.pollutants.o3 * (1 + factor * 0.5)),
    )

    coverage = clamp(round(raw_coverage), 0, 100)
    ndvi = clamp(round(base.ndvi + factor * 0.2, 2), -1.0, 1.0)

    disasters = max(0, round(raw_disasters))
    hotspots = max(0, round(raw_hotspots))

    activity_trends: tuple[ActivityTrend, ...] = ("increasing", "stable", "decreasing")
    air_trends: tuple[AirQualityTrend, ...] = ("improving", "stable", "worsening")
    green_trends: tuple[GreenSpaceTrend, ...] = ("improving", "stable", "declining")

    return CityVitals(
        heart_rate=HeartRate(
            value=float(heart_rate),
            status=heart_rate_status(raw_heart_rate),
            trend=rng.choice(activity_trends),
            description=_describe_heart_rate(heart_rate),
            source=source,
        ),
        temperature=Temperature(
            value=temperature,
            heat_island_effect=heat_island,
            status=temperature_status,
            trend=rng.choice(activity_trends),
            description=describe_temperature(temperature, heat_island, temperature_status),
            source=source,
        ),
        blood_oxygen=BloodOxygen(
            value=float(aqi),
            pollutants=pollutants,
            status=determine_air_quality_status(raw_aqi),
            trend=rng.choice(air_trends),
            description=_describe_air_quality(aqi),
            source=source,
        ),
        immune_system=ImmuneSystem(
            green_space_coverage=float(coverage),
            ndvi=ndvi,
            status=green_space_status(raw_coverage),
            trend=rng.choice(green_trends),
            description=_describe_green_space(coverage),
            source=source,
        ),
        infections=Infections(
            disaster_events=disasters,
            pollution_hotspots=hotspots,
            status=infection_status(raw_disasters, raw_hotspots),
            description=_describe_hazards(disasters + hotspots),
            source=source,
        ),
    )
