"""Diagnostic engine: weighted city health score, severity and recommendations.

Every category scorer applies its additive adjustments first and the
multiplicative status penalty last, then clamps to [0, 100]. Reordering
those steps changes results near the thresholds.
"""

from __future__ import annotations

import math
from dataclasses import replace

from city_pulse.models import (
    BloodOxygen,
    CityVitals,
    DiagnosticResult,
    HealthScore,
    HeartRate,
    ImmuneSystem,
    Infections,
    OverallHealth,
    OverallStatus,
    Severity,
    Temperature,
)

CATEGORY_WEIGHTS: dict[str, float] = {
    "heart_rate": 0.15,  # urban activity
    "temperature": 0.20,  # heat island
    "blood_oxygen": 0.25,  # air quality
    "immune_system": 0.25,  # green space
    "infections": 0.15,  # disasters and pollution
}

CATEGORY_LABELS: dict[str, str] = {
    "heart_rate": "Heart Rate (Urban Activity)",
    "temperature": "Temperature (Heat Island)",
    "blood_oxygen": "Air Quality",
    "immune_system": "Green Space",
    "infections": "Environmental Hazards",
}

# (minimum score, diagnosis text), highest band first
HEALTH_BANDS: list[tuple[int, str]] = [
    (
        90,
        "This city is in excellent health! All vital signs are strong, showing a "
        "well-balanced urban ecosystem with good air quality, adequate green space, "
        "and minimal environmental hazards.",
    ),
    (
        75,
        "The city shows good overall health with minor areas for improvement. Most "
        "vital signs are within normal ranges, but there may be some environmental "
        "concerns to address.",
    ),
    (
        60,
        "The city's health is fair but requires attention. Several vital signs "
        "indicate moderate stress, particularly in air quality or heat management. "
        "Immediate action is recommended.",
    ),
    (
        40,
        "The city is showing signs of poor health with multiple concerning vital "
        "signs. Environmental stress is evident, and comprehensive intervention is "
        "needed to restore urban wellness.",
    ),
    (
        0,
        "CRITICAL: The city is in poor health with multiple critical vital signs. "
        "Immediate environmental intervention is required to prevent further "
        "degradation of urban health.",
    ),
]

AIR_QUALITY_RECOMMENDATIONS = (
    "Implement low-emission zones and promote electric vehicle adoption",
    "Increase urban tree canopy to filter air pollutants",
    "Develop comprehensive bike lane networks to reduce vehicle emissions",
)
HEAT_RECOMMENDATIONS = (
    "Mandate cool roof technologies for new and existing buildings",
    "Create green corridors to channel cool air through the city",
    "Implement water features and reflective surfaces in public spaces",
)
GREEN_SPACE_RECOMMENDATIONS = (
    "Establish pocket parks and community gardens in underserved areas",
    "Develop green infrastructure corridors connecting parks and natural areas",
    "Require green space minimums in new development projects",
)
HAZARD_RECOMMENDATIONS = (
    "Strengthen infrastructure resilience against natural disasters",
    "Implement early warning systems for environmental hazards",
    "Develop climate-adaptive building codes and zoning regulations",
)
URBAN_ACTIVITY_RECOMMENDATIONS = (
    "Promote mixed-use development to reduce urban sprawl",
    "Improve public transportation to reduce traffic congestion",
    "Implement smart city technologies for efficient resource management",
)
GENERAL_RECOMMENDATIONS = (
    "Continue monitoring urban health indicators",
    "Set up long-term environmental monitoring systems",
    "Engage community in urban health initiatives",
)
MAX_RECOMMENDATIONS = 5

SEVERITY_STATUS: dict[Severity, OverallStatus] = {
    "low": "excellent",
    "medium": "good",
    "high": "fair",
    "critical": "poor",
}


def _clamp_score(score: float) -> float:
    if math.isnan(score):
        return 0.0
    return max(0.0, min(100.0, score))


# ---------------------------------------------------------------------------
# Category scores
# ---------------------------------------------------------------------------


def score_heart_rate(heart_rate: HeartRate) -> float:
    score = heart_rate.value
    if heart_rate.trend == "increasing":
        score += 5
    elif heart_rate.trend == "decreasing":
        score -= 5

    if heart_rate.status == "critical":
        score *= 0.5
    elif heart_rate.status == "elevated":
        score *= 0.8
    return _clamp_score(score)


def score_temperature(temperature: Temperature) -> float:
    score = 100.0
    if temperature.value > 35:
        score -= 30
    elif temperature.value > 30:
        score -= 20
    elif temperature.value > 25:
        score -= 10

    if temperature.heat_island_effect > 5:
        score -= 25
    elif temperature.heat_island_effect > 3:
        score -= 15
    elif temperature.heat_island_effect > 1:
        score -= 5

    if temperature.trend == "increasing":
        score -= 10
    elif temperature.trend == "decreasing":
        score += 5

    if temperature.status == "critical":
        score *= 0.3
    elif temperature.status == "fever":
        score *= 0.6
    return _clamp_score(score)


def score_air_quality(blood_oxygen: BloodOxygen) -> float:
    # lower AQI is healthier
    score = 100.0 - blood_oxygen.value

    avg_pollutants = blood_oxygen.pollutants.mean
    if avg_pollutants > 50:
        score -= 30
    elif avg_pollutants > 30:
        score -= 20
    elif avg_pollutants > 15:
        score -= 10

    if blood_oxygen.trend == "worsening":
        score -= 15
    elif blood_oxygen.trend == "improving":
        score += 10

    if blood_oxygen.status == "hazardous":
        score *= 0.2
    elif blood_oxygen.status == "unhealthy":
        score *= 0.5
    return _clamp_score(score)


def score_green_space(immune_system: ImmuneSystem) -> float:
    score = immune_system.green_space_coverage

    if immune_system.ndvi > 0.7:
        score += 20
    elif immune_system.ndvi > 0.5:
        score += 10
    elif immune_system.ndvi < 0.2:
        score -= 20

    if immune_system.trend == "improving":
        score += 10
    elif immune_system.trend == "declining":
        score -= 15

    if immune_system.status == "compromised":
        score *= 0.4
    elif immune_system.status == "weak":
        score *= 0.7
    return _clamp_score(score)


def score_infections(infections: Infections) -> float:
    hazards = infections.disaster_events + infections.pollution_hotspots
    score = 100.0 - hazards * 15

    if infections.status == "critical":
        score *= 0.2
    elif infections.status == "infected":
        score *= 0.5
    return _clamp_score(score)


def calculate_category_scores(vitals: CityVitals) -> tuple[HealthScore, ...]:
    """One HealthScore per vitals category, in fixed category order."""
    scored = [
        ("heart_rate", score_heart_rate(vitals.heart_rate), vitals.heart_rate.status),
        ("temperature", score_temperature(vitals.temperature), vitals.temperature.status),
        ("blood_oxygen", score_air_quality(vitals.blood_oxygen), vitals.blood_oxygen.status),
        ("immune_system", score_green_space(vitals.immune_system), vitals.immune_system.status),
        ("infections", score_infections(vitals.infections), vitals.infections.status),
    ]
    return tuple(
        HealthScore(
            category=CATEGORY_LABELS[key],
            score=score,
            weight=CATEGORY_WEIGHTS[key],
            status=status,
        )
        for key, score, status in scored
    )


def calculate_overall_score(category_scores: tuple[HealthScore, ...]) -> int:
    """Weighted sum rounded half-up (74.5 -> 75), bounded to [0, 100]."""
    weighted = sum(c.score * c.weight for c in category_scores)
    return int(max(0, min(100, math.floor(weighted + 0.5))))


# ---------------------------------------------------------------------------
# Text and bands
# ---------------------------------------------------------------------------


def generate_diagnosis_text(score: int) -> str:
    for minimum, text in HEALTH_BANDS:
        if score >= minimum:
            return text
    return HEALTH_BANDS[-1][1]


def determine_overall_status(severity: Severity) -> OverallStatus:
    return SEVERITY_STATUS[severity]


def determine_severity(score: int) -> Severity:
    if score >= 75:
        return "low"
    if score >= 60:
        return "medium"
    if score >= 40:
        return "high"
    return "critical"


def generate_recommendations(vitals: CityVitals) -> tuple[str, ...]:
    """Recommendations for every triggered condition, in priority order, capped at 5.

    Falls back to the three general monitoring recommendations when no
    condition triggers.
    """
    recommendations: list[str] = []
    if vitals.blood_oxygen.status in ("hazardous", "unhealthy"):
        recommendations.extend(AIR_QUALITY_RECOMMENDATIONS)
    if vitals.temperature.status in ("critical", "fever"):
        recommendations.extend(HEAT_RECOMMENDATIONS)
    if vitals.immune_system.status in ("weak", "compromised"):
        recommendations.extend(GREEN_SPACE_RECOMMENDATIONS)
    if vitals.infections.status in ("critical", "infected"):
        recommendations.extend(HAZARD_RECOMMENDATIONS)
    if vitals.heart_rate.status in ("critical", "elevated"):
        recommendations.extend(URBAN_ACTIVITY_RECOMMENDATIONS)

    if not recommendations:
        recommendations.extend(GENERAL_RECOMMENDATIONS)
    return tuple(recommendations[:MAX_RECOMMENDATIONS])


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def diagnose(vitals: CityVitals) -> DiagnosticResult:
    """Score *vitals* and derive severity, diagnosis and recommendations.

    Pure and deterministic: the same snapshot always yields an equal result.
    """
    category_scores = calculate_category_scores(vitals)
    overall = calculate_overall_score(category_scores)
    return DiagnosticResult(
        overall_score=overall,
        category_scores=category_scores,
        diagnosis=generate_diagnosis_text(overall),
        recommendations=generate_recommendations(vitals),
        severity=determine_severity(overall),
    )


def apply_diagnosis(vitals: CityVitals, result: DiagnosticResult) -> CityVitals:
    """Return a copy of *vitals* with ``overall_health`` filled from *result*."""
    return replace(
        vitals,
        overall_health=OverallHealth(
            score=result.overall_score,
            status=determine_overall_status(result.severity),
            diagnosis=result.diagnosis,
            recommendations=result.recommendations,
        ),
    )
