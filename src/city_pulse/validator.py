"""Advisory validation of locations, raw provider responses and assembled vitals.

Nothing here raises or gates the pipeline. Errors mark structurally
unusable data; warnings mark suspicious but usable data.
"""

from __future__ import annotations

import math
import time
from typing import Any

from city_pulse.models import CityVitals, DataQualityReport, LocationData, ValidationResult

LOCATION_MAX_AGE_MS = 24 * 60 * 60 * 1000
EARTHQUAKE_MAX_AGE_MS = 365 * 24 * 60 * 60 * 1000
STALE_AFTER_MS = 5 * 60 * 1000


def is_number(value: object) -> bool:
    """True for real ints/floats that are not NaN (bools excluded)."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


def _result(errors: list[str], warnings: list[str]) -> ValidationResult:
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_location(location: LocationData, now_ms: int | None = None) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not is_number(location.lat):
        errors.append("Latitude must be a valid number")
    elif not -90 <= location.lat <= 90:
        errors.append("Latitude must be between -90 and 90 degrees")

    if not is_number(location.lon):
        errors.append("Longitude must be a valid number")
    elif not -180 <= location.lon <= 180:
        errors.append("Longitude must be between -180 and 180 degrees")

    if not is_number(location.timestamp):
        errors.append("Timestamp must be a valid number")
    else:
        now = _now_ms() if now_ms is None else now_ms
        if now - location.timestamp > LOCATION_MAX_AGE_MS:
            warnings.append("Location data is more than 24 hours old")

    return _result(errors, warnings)


def validate_air_quality_data(data: Any) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if data is None:
        return _result(["No data received from air quality API"], warnings)

    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        errors.append("Invalid data structure: missing or invalid results array")
    elif not results:
        warnings.append("No air quality data available for this location")
    else:
        for i, result in enumerate(results, start=1):
            if not isinstance(result, dict):
                warnings.append(f"Result {i}: invalid entry")
                continue
            if not result.get("location"):
                warnings.append(f"Result {i}: missing location information")
            measurements = result.get("measurements")
            if not isinstance(measurements, list):
                warnings.append(f"Result {i}: missing or invalid measurements")
                continue
            for j, m in enumerate(measurements, start=1):
                prefix = f"Result {i}, Measurement {j}"
                if not isinstance(m, dict):
                    warnings.append(f"{prefix}: invalid entry")
                    continue
                if not m.get("parameter"):
                    warnings.append(f"{prefix}: missing parameter")
                value = m.get("value")
                if not is_number(value):
                    warnings.append(f"{prefix}: invalid value")
                elif value < 0:
                    warnings.append(f"{prefix}: negative value detected")
                elif value > 1000:
                    warnings.append(f"{prefix}: unusually high value detected")

    return _result(errors, warnings)


def validate_earthquake_data(data: Any, now_ms: int | None = None) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if data is None:
        return _result(["No data received from earthquake API"], warnings)

    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list):
        errors.append("Invalid data structure: missing or invalid features array")
        return _result(errors, warnings)

    now = _now_ms() if now_ms is None else now_ms
    for i, feature in enumerate(features, start=1):
        if not isinstance(feature, dict):
            warnings.append(f"Feature {i}: invalid entry")
            continue
        props = feature.get("properties")
        if not isinstance(props, dict) or not props:
            warnings.append(f"Feature {i}: missing properties")
        else:
            if not is_number(props.get("mag")):
                warnings.append(f"Feature {i}: invalid magnitude")
            event_time = props.get("time")
            if not is_number(event_time):
                warnings.append(f"Feature {i}: invalid timestamp")
            elif now - event_time > EARTHQUAKE_MAX_AGE_MS:
                warnings.append(f"Feature {i}: earthquake is more than 1 year old")

        geometry = feature.get("geometry")
        if not isinstance(geometry, dict) or not geometry:
            warnings.append(f"Feature {i}: missing geometry")
        elif not isinstance(geometry.get("coordinates"), list):
            warnings.append(f"Feature {i}: invalid coordinates")

    return _result(errors, warnings)


def validate_weather_data(data: Any) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if data is None:
        return _result(["No data received from weather API"], warnings)

    main = data.get("main") if isinstance(data, dict) else None
    if not isinstance(main, dict) or not main:
        errors.append("Invalid data structure: missing main object")
    else:
        temp = main.get("temp")
        if not is_number(temp):
            errors.append("Invalid temperature data")
        elif temp < -50 or temp > 60:
            warnings.append("Temperature value seems unrealistic")

        humidity = main.get("humidity")
        if not is_number(humidity):
            warnings.append("Invalid humidity data")
        elif humidity < 0 or humidity > 100:
            warnings.append("Humidity value out of expected range (0-100%)")

        pressure = main.get("pressure")
        if not is_number(pressure):
            warnings.append("Invalid pressure data")
        elif pressure < 800 or pressure > 1100:
            warnings.append("Pressure value seems unrealistic")

    coord = data.get("coord") if isinstance(data, dict) else None
    if not isinstance(coord, dict) or not coord:
        warnings.append("Missing coordinate information")
    elif not (is_number(coord.get("lat")) and is_number(coord.get("lon"))):
        warnings.append("Invalid coordinate data")

    return _result(errors, warnings)


def validate_city_vitals(vitals: CityVitals) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    def check(value: Any, label: str, low: float, high: float, warning: str) -> None:
        if not is_number(value):
            errors.append(f"Invalid {label} value")
        elif value < low or value > high:
            warnings.append(warning)

    check(vitals.heart_rate.value, "heart rate", 0, 200, "Heart rate value seems unrealistic")
    check(vitals.temperature.value, "temperature", -50, 60,
          "Temperature value seems unrealistic")
    check(vitals.blood_oxygen.value, "air quality", 0, 500,
          "Air quality value out of expected range")

    pollutants = vitals.blood_oxygen.pollutants
    for label, value in (
        ("NO2", pollutants.no2),
        ("PM2.5", pollutants.pm25),
        ("O3", pollutants.o3),
    ):
        if not is_number(value) or value < 0:
            warnings.append(f"Invalid {label} value")

    check(vitals.immune_system.green_space_coverage, "green space coverage", 0, 100,
          "Green space coverage out of expected range (0-100%)")
    check(vitals.immune_system.ndvi, "NDVI", -1, 1, "NDVI value out of expected range (-1 to 1)")

    if not is_number(vitals.infections.disaster_events) or vitals.infections.disaster_events < 0:
        warnings.append("Invalid disaster events count")
    if (
        not is_number(vitals.infections.pollution_hotspots)
        or vitals.infections.pollution_hotspots < 0
    ):
        warnings.append("Invalid pollution hotspots count")

    check(vitals.overall_health.score, "overall health score", 0, 100,
          "Overall health score out of expected range (0-100)")

    return _result(errors, warnings)


def generate_quality_report(vitals: CityVitals, now_ms: int | None = None) -> DataQualityReport:
    """Score data quality: 100 minus 20 per error and 5 per warning, floored at 0."""
    validation = validate_city_vitals(vitals)
    score = 100 - 20 * len(validation.errors) - 5 * len(validation.warnings)
    score = max(0, score)

    recommendations: list[str] = []
    if validation.errors:
        recommendations.append("Fix critical data validation errors")
    if validation.warnings:
        recommendations.append("Review and address data quality warnings")
    if score < 80:
        recommendations.append("Improve data quality and validation")
    if score < 60:
        recommendations.append("Consider using alternative data sources")

    return DataQualityReport(
        overall_score=score,
        issues=[*validation.errors, *validation.warnings],
        recommendations=recommendations,
        timestamp=_now_ms() if now_ms is None else now_ms,
    )


def validate_api_response(service: str, data: Any) -> ValidationResult:
    if service == "air_quality":
        return validate_air_quality_data(data)
    if service == "earthquake":
        return validate_earthquake_data(data)
    if service == "weather":
        return validate_weather_data(data)
    return _result([f"Unknown service: {service}"], [])


def sanitize_data(data: Any) -> Any:
    """Shallow clean-up: drop None/NaN entries and strip string values."""
    if not isinstance(data, dict):
        return data
    sanitized = {}
    for key, value in data.items():
        if value is None or (isinstance(value, float) and math.isnan(value)):
            continue
        sanitized[key] = value.strip() if isinstance(value, str) else value
    return sanitized


def is_data_stale(
    timestamp_ms: int, max_age_ms: int = STALE_AFTER_MS, now_ms: int | None = None
) -> bool:
    now = _now_ms() if now_ms is None else now_ms
    return now - timestamp_ms > max_age_ms
