"""Tests for the advisory data validator."""

from __future__ import annotations

import math
from dataclasses import replace

import pytest

from city_pulse.models import LocationData
from city_pulse.validator import (
    generate_quality_report,
    is_data_stale,
    sanitize_data,
    validate_air_quality_data,
    validate_api_response,
    validate_city_vitals,
    validate_earthquake_data,
    validate_location,
    validate_weather_data,
)

DAY_MS = 24 * 60 * 60 * 1000


class TestValidateLocation:
    def test_lat_90_is_valid(self, now_ms):
        result = validate_location(LocationData(90, 0, now_ms), now_ms=now_ms)
        assert result.is_valid
        assert result.errors == []

    def test_lat_91_is_invalid(self, now_ms):
        result = validate_location(LocationData(91, 0, now_ms), now_ms=now_ms)
        assert not result.is_valid
        assert "Latitude must be between -90 and 90 degrees" in result.errors

    def test_lon_out_of_range(self, now_ms):
        result = validate_location(LocationData(0, -180.5, now_ms), now_ms=now_ms)
        assert "Longitude must be between -180 and 180 degrees" in result.errors

    def test_nan_latitude(self, now_ms):
        result = validate_location(LocationData(math.nan, 0, now_ms), now_ms=now_ms)
        assert "Latitude must be a valid number" in result.errors

    def test_old_location_warns(self, now_ms):
        result = validate_location(LocationData(10, 10, now_ms - 2 * DAY_MS), now_ms=now_ms)
        assert result.is_valid
        assert result.warnings == ["Location data is more than 24 hours old"]


class TestValidateAirQuality:
    def test_sample_is_clean(self, sample_openaq_response):
        result = validate_air_quality_data(sample_openaq_response)
        assert result.is_valid
        assert result.warnings == []

    def test_missing_results(self):
        result = validate_air_quality_data({})
        assert not result.is_valid

    def test_none(self):
        assert validate_air_quality_data(None).errors == ["No data received from air quality API"]

    def test_empty_results_warns(self):
        result = validate_air_quality_data({"results": []})
        assert result.is_valid
        assert result.warnings == ["No air quality data available for this location"]

    def test_measurement_warnings(self):
        data = {
            "results": [
                {
                    "location": "X",
                    "measurements": [
                        {"parameter": "pm25", "value": -1},
                        {"parameter": "pm25", "value": 5000},
                        {"value": 3},
                    ],
                }
            ]
        }
        result = validate_air_quality_data(data)
        assert result.is_valid
        assert result.warnings == [
            "Result 1, Measurement 1: negative value detected",
            "Result 1, Measurement 2: unusually high value detected",
            "Result 1, Measurement 3: missing parameter",
        ]


class TestValidateEarthquake:
    def test_sample(self, sample_usgs_response, now_ms):
        result = validate_earthquake_data(sample_usgs_response, now_ms=now_ms)
        assert result.is_valid
        assert result.warnings == []

    def test_year_old_event_warns(self, now_ms):
        data = {
            "features": [
                {
                    "properties": {"mag": 3.0, "time": now_ms - 400 * DAY_MS},
                    "geometry": {"coordinates": [0, 0]},
                }
            ]
        }
        result = validate_earthquake_data(data, now_ms=now_ms)
        assert result.warnings == ["Feature 1: earthquake is more than 1 year old"]

    def test_missing_features(self):
        assert not validate_earthquake_data({"type": "FeatureCollection"}).is_valid


class TestValidateWeather:
    def test_sample(self, sample_weather_response):
        result = validate_weather_data(sample_weather_response)
        assert result.is_valid
        assert result.warnings == []

    def test_missing_main(self):
        result = validate_weather_data({"coord": {"lat": 1, "lon": 2}})
        assert result.errors == ["Invalid data structure: missing main object"]

    def test_bad_temperature(self):
        result = validate_weather_data(
            {"main": {"temp": "warm", "humidity": 50, "pressure": 1000}, "coord": {"lat": 1, "lon": 2}}
        )
        assert result.errors == ["Invalid temperature data"]

    def test_range_warnings(self):
        result = validate_weather_data(
            {"main": {"temp": -60, "humidity": 120, "pressure": 700}}
        )
        assert result.is_valid
        assert result.warnings == [
            "Temperature value seems unrealistic",
            "Humidity value out of expected range (0-100%)",
            "Pressure value seems unrealistic",
            "Missing coordinate information",
        ]


class TestValidateApiResponse:
    def test_dispatch(self, sample_weather_response):
        assert validate_api_response("weather", sample_weather_response).is_valid

    def test_unknown_service(self):
        result = validate_api_response("traffic", {})
        assert result.errors == ["Unknown service: traffic"]


class TestVitalsAndQuality:
    def test_healthy_vitals_score_100(self, healthy_vitals, now_ms):
        report = generate_quality_report(healthy_vitals, now_ms=now_ms)
        assert report.overall_score == 100
        assert report.issues == []
        assert report.recommendations == []
        assert report.timestamp == now_ms

    def test_penalties(self, healthy_vitals):
        vitals = replace(
            healthy_vitals,
            heart_rate=replace(healthy_vitals.heart_rate, value=math.nan),
            temperature=replace(healthy_vitals.temperature, value=-55.0),
        )
        validation = validate_city_vitals(vitals)
        assert validation.errors == ["Invalid heart rate value"]
        assert validation.warnings == ["Temperature value seems unrealistic"]

        report = generate_quality_report(vitals)
        assert report.overall_score == 75
        assert report.recommendations == [
            "Fix critical data validation errors",
            "Review and address data quality warnings",
            "Improve data quality and validation",
        ]

    def test_score_floored_at_zero(self, healthy_vitals):
        nan = math.nan
        vitals = replace(
            healthy_vitals,
            heart_rate=replace(healthy_vitals.heart_rate, value=nan),
            temperature=replace(healthy_vitals.temperature, value=nan),
            blood_oxygen=replace(healthy_vitals.blood_oxygen, value=nan),
            immune_system=replace(healthy_vitals.immune_system, green_space_coverage=nan, ndvi=nan),
        )
        report = generate_quality_report(vitals)
        assert report.overall_score == 0
        assert "Consider using alternative data sources" in report.recommendations


class TestHelpers:
    def test_sanitize_data(self):
        assert sanitize_data({"a": None, "b": math.nan, "c": "  x ", "d": 1}) == {"c": "x", "d": 1}

    def test_sanitize_passes_through_non_dict(self):
        assert sanitize_data([1, 2]) == [1, 2]

    @pytest.mark.parametrize("age_ms, expected", [(0, False), (5 * 60 * 1000, False), (5 * 60 * 1000 + 1, True)])
    def test_is_data_stale(self, now_ms, age_ms, expected):
        assert is_data_stale(now_ms - age_ms, now_ms=now_ms) is expected
