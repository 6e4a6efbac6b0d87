"""CityPulse: city health scoring from weather, air-quality and seismic data."""

__version__ = "0.1.0"
