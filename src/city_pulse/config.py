"""Configuration model for the CityPulse pipeline."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

OPENAQ_BASE = "https://api.openaq.org/v1"
USGS_BASE = "https://earthquake.usgs.gov/fdsnws/event/1"
OPENWEATHER_BASE = "https://api.openweathermap.org/data/2.5"


class CityPulseConfig(BaseSettings):
    """All configurable parameters for the CityPulse pipeline.

    Values can be set via constructor arguments, environment variables
    prefixed with CITY_PULSE_, or defaults.
    """

    model_config = {"env_prefix": "CITY_PULSE_"}

    request_timeout: float = Field(
        default=10.0, gt=0.0, le=120.0, description="Per-request HTTP timeout in seconds."
    )
    openaq_base_url: str = Field(default=OPENAQ_BASE, description="OpenAQ API base URL.")
    usgs_base_url: str = Field(default=USGS_BASE, description="USGS FDSN event API base URL.")
    openweather_base_url: str = Field(
        default=OPENWEATHER_BASE, description="OpenWeatherMap API base URL."
    )
    openweather_api_key: str = Field(
        default="", description="OpenWeatherMap API key (weather is skipped when empty)."
    )
    air_quality_radius_m: int = Field(
        default=10000, gt=0, description="Station search radius around the point (metres)."
    )
    seismic_radius_deg: float = Field(
        default=1.0, gt=0.0, le=10.0, description="Half-width of the seismic bounding box (degrees)."
    )
    seismic_min_magnitude: float = Field(
        default=2.5, ge=0.0, le=10.0, description="Minimum earthquake magnitude."
    )
    seismic_days_lookback: int = Field(
        default=30, ge=1, le=365, description="Number of days of seismic history to request."
    )
    use_mock_data: bool = Field(
        default=False, description="Generate mock vitals instead of calling upstream APIs."
    )
    test_delay_seconds: float = Field(
        default=1.0, ge=0.0, description="Pause between locations in the API test harness."
    )
