"""Data models for the CityPulse pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

HeartRateStatus = Literal["normal", "elevated", "critical"]
TemperatureStatus = Literal["normal", "fever", "critical"]
AirQualityStatus = Literal["healthy", "unhealthy", "hazardous"]
GreenSpaceStatus = Literal["strong", "weak", "compromised"]
InfectionStatus = Literal["clean", "infected", "critical"]
OverallStatus = Literal["excellent", "good", "fair", "poor", "critical"]
Severity = Literal["low", "medium", "high", "critical"]

ActivityTrend = Literal["increasing", "stable", "decreasing"]
AirQualityTrend = Literal["improving", "stable", "worsening"]
GreenSpaceTrend = Literal["improving", "stable", "declining"]


@dataclass(frozen=True)
class LocationData:
    """A queried coordinate; timestamp is epoch milliseconds."""

    lat: float
    lon: float
    timestamp: int
    city: str | None = None
    country: str | None = None


# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Measured:
    """Value derived from a successful upstream response."""

    provider: str
    kind: Literal["measured"] = "measured"


@dataclass(frozen=True)
class Synthetic:
    """Placeholder drawn uniformly from [low, high]; not a measurement."""

    generator: str
    low: float
    high: float
    kind: Literal["synthetic"] = "synthetic"


@dataclass(frozen=True)
class Fallback:
    """Neutral default substituted because the provider failed or was absent."""

    provider: str
    reason: str
    kind: Literal["fallback"] = "fallback"


DataSource = Measured | Synthetic | Fallback


# ---------------------------------------------------------------------------
# Vitals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pollutants:
    no2: float = 0.0
    pm25: float = 0.0
    o3: float = 0.0

    @property
    def mean(self) -> float:
        return (self.no2 + self.pm25 + self.o3) / 3


@dataclass(frozen=True)
class HeartRate:
    """Urban-activity proxy (nighttime-light intensity)."""

    value: float
    status: HeartRateStatus
    trend: ActivityTrend
    description: str
    source: DataSource


@dataclass(frozen=True)
class Temperature:
    """Surface temperature in Celsius plus the estimated heat-island delta."""

    value: float
    heat_island_effect: float
    status: TemperatureStatus
    trend: ActivityTrend
    description: str
    source: DataSource


@dataclass(frozen=True)
class BloodOxygen:
    """Air quality; value is the AQI (0-500)."""

    value: float
    pollutants: Pollutants
    status: AirQualityStatus
    trend: AirQualityTrend
    description: str
    source: DataSource


@dataclass(frozen=True)
class ImmuneSystem:
    """Green-space proxy: vegetation coverage (%) and NDVI."""

    green_space_coverage: float
    ndvi: float
    status: GreenSpaceStatus
    trend: GreenSpaceTrend
    description: str
    source: DataSource


@dataclass(frozen=True)
class Infections:
    """Environmental hazards: recent disaster events and pollution hotspots."""

    disaster_events: int
    pollution_hotspots: int
    status: InfectionStatus
    description: str
    source: DataSource


@dataclass(frozen=True)
class OverallHealth:
    score: int = 0
    status: OverallStatus = "fair"
    diagnosis: str = ""
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class CityVitals:
    """The five vital categories of a location, plus the overall diagnosis.

    ``overall_health`` is a zero-valued placeholder until
    ``diagnostics.apply_diagnosis`` returns a populated copy.
    """

    heart_rate: HeartRate
    temperature: Temperature
    blood_oxygen: BloodOxygen
    immune_system: ImmuneSystem
    infections: Infections
    overall_health: OverallHealth = field(default_factory=OverallHealth)

    def sources(self) -> dict[str, DataSource]:
        return {
            "heart_rate": self.heart_rate.source,
            "temperature": self.temperature.source,
            "blood_oxygen": self.blood_oxygen.source,
            "immune_system": self.immune_system.source,
            "infections": self.infections.source,
        }

    def unmeasured_categories(self) -> list[str]:
        """Categories whose values were not measured upstream."""
        return [name for name, src in self.sources().items() if src.kind != "measured"]


# ---------------------------------------------------------------------------
# Diagnosis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HealthScore:
    category: str
    score: float
    weight: float
    status: str


@dataclass(frozen=True)
class DiagnosticResult:
    overall_score: int
    category_scores: tuple[HealthScore, ...]
    diagnosis: str
    recommendations: tuple[str, ...]
    severity: Severity


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class DataQualityReport:
    overall_score: int
    issues: list[str]
    recommendations: list[str]
    timestamp: int
