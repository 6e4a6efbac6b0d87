"""Shared fixtures for city_pulse tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from city_pulse.config import CityPulseConfig
from city_pulse.models import (
    BloodOxygen,
    CityVitals,
    HeartRate,
    ImmuneSystem,
    Infections,
    LocationData,
    Measured,
    Pollutants,
    Temperature,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Reference "now" for time-dependent tests: 2023-11-14T22:13:20Z
NOW_MS = 1_700_000_000_000


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def now_ms() -> int:
    return NOW_MS


@pytest.fixture
def sample_openaq_response() -> dict:
    return json.loads((FIXTURES_DIR / "openaq_sample.json").read_text(encoding="utf-8"))


@pytest.fixture
def sample_usgs_response() -> dict:
    return json.loads((FIXTURES_DIR / "usgs_sample.json").read_text(encoding="utf-8"))


@pytest.fixture
def sample_weather_response() -> dict:
    return json.loads((FIXTURES_DIR / "weather_sample.json").read_text(encoding="utf-8"))


@pytest.fixture
def la_location() -> LocationData:
    return LocationData(lat=34.0522, lon=-118.2437, timestamp=NOW_MS, city="Los Angeles")


@pytest.fixture
def default_config() -> CityPulseConfig:
    """Config with a fake weather key and no inter-location delay."""
    return CityPulseConfig(openweather_api_key="test-key", test_delay_seconds=0.0)


@pytest.fixture
def healthy_vitals() -> CityVitals:
    """Vitals where every category scores exactly 100."""
    return CityVitals(
        heart_rate=HeartRate(
            value=100.0,
            status="normal",
            trend="stable",
            description="Steady.",
            source=Measured("test"),
        ),
        temperature=Temperature(
            value=20.0,
            heat_island_effect=0.0,
            status="normal",
            trend="stable",
            description="Mild.",
            source=Measured("test"),
        ),
        blood_oxygen=BloodOxygen(
            value=0.0,
            pollutants=Pollutants(),
            status="healthy",
            trend="stable",
            description="Clean air.",
            source=Measured("test"),
        ),
        immune_system=ImmuneSystem(
            green_space_coverage=100.0,
            ndvi=0.6,
            status="strong",
            trend="stable",
            description="Lush.",
            source=Measured("test"),
        ),
        infections=Infections(
            disaster_events=0,
            pollution_hotspots=0,
            status="clean",
            description="None.",
            source=Measured("test"),
        ),
    )
