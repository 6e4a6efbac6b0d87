"""Integration tests for the pipeline."""

from __future__ import annotations

import logging
import random

import pytest
import responses
from requests.exceptions import ConnectionError as RequestsConnectionError

from city_pulse.config import CityPulseConfig
from city_pulse.http import UpstreamError
from city_pulse.models import LocationData, Measured, Synthetic
from city_pulse.pipeline import (
    InvalidLocationError,
    QueryGuard,
    SourceResults,
    fetch_sources,
    run_query,
)

OPENAQ_URL = "https://api.openaq.org/v1/latest"
USGS_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


def _mock_upstreams(openaq: dict, usgs: dict, weather: dict) -> None:
    """Register successful responses for all three providers."""
    responses.add(responses.GET, OPENAQ_URL, json=openaq, status=200)
    responses.add(responses.GET, USGS_URL, json=usgs, status=200)
    responses.add(responses.GET, WEATHER_URL, json=weather, status=200)


class TestFetchSources:
    @responses.activate
    def test_one_failure_keeps_the_others(
        self, la_location, default_config, sample_openaq_response, sample_weather_response
    ):
        responses.add(responses.GET, OPENAQ_URL, json=sample_openaq_response, status=200)
        responses.add(responses.GET, USGS_URL, body=RequestsConnectionError("refused"))
        responses.add(responses.GET, WEATHER_URL, json=sample_weather_response, status=200)

        sources = fetch_sources(la_location, default_config)

        assert sources.air_quality == sample_openaq_response
        assert sources.weather == sample_weather_response
        assert isinstance(sources.earthquake, UpstreamError)
        assert sources.errors() == {
            "earthquake": "Network error: Unable to reach earthquake service"
        }
        assert not sources.all_failed

    @responses.activate
    def test_all_failed(self, la_location, default_config):
        responses.add(responses.GET, OPENAQ_URL, status=500)
        responses.add(responses.GET, USGS_URL, status=502)
        responses.add(responses.GET, WEATHER_URL, status=503)

        sources = fetch_sources(la_location, default_config)

        assert sources.all_failed
        assert set(sources.errors()) == {"air_quality", "earthquake", "weather"}

    @responses.activate
    def test_missing_weather_key_only_fails_weather(
        self, la_location, sample_openaq_response, sample_usgs_response
    ):
        responses.add(responses.GET, OPENAQ_URL, json=sample_openaq_response, status=200)
        responses.add(responses.GET, USGS_URL, json=sample_usgs_response, status=200)

        sources = fetch_sources(la_location, CityPulseConfig(openweather_api_key=""))

        assert list(sources.errors()) == ["weather"]
        assert len(responses.calls) == 2

    def test_empty_results_not_failed(self):
        assert SourceResults().errors() == {}
        assert not SourceResults().all_failed


class TestRunQuery:
    def test_invalid_location_raises(self, now_ms):
        with pytest.raises(InvalidLocationError, match="Latitude must be between") as exc_info:
            run_query(LocationData(91.0, 0.0, now_ms), CityPulseConfig(use_mock_data=True))
        assert isinstance(exc_info.value, ValueError)

    @responses.activate
    def test_mock_mode_makes_no_requests(self, la_location):
        result = run_query(
            la_location, CityPulseConfig(use_mock_data=True), rng=random.Random(5)
        )
        assert len(responses.calls) == 0
        assert result.source_errors == {}
        assert not result.all_sources_failed
        assert isinstance(result.vitals.temperature.source, Synthetic)
        assert result.vitals.overall_health.score == result.diagnostic.overall_score

    @responses.activate
    def test_full_query_with_fixtures(
        self,
        la_location,
        default_config,
        sample_openaq_response,
        sample_usgs_response,
        sample_weather_response,
    ):
        _mock_upstreams(sample_openaq_response, sample_usgs_response, sample_weather_response)

        result = run_query(la_location, default_config, rng=random.Random(1))

        assert result.source_errors == {}
        assert result.vitals.blood_oxygen.source == Measured("openaq")
        assert result.vitals.temperature.value == 22.5
        assert 0 <= result.diagnostic.overall_score <= 100
        assert result.vitals.overall_health.status in {"excellent", "good", "fair", "poor", "critical"}
        assert 1 <= len(result.vitals.overall_health.recommendations) <= 5
        assert result.validation.is_valid
        assert result.quality.overall_score == 100

    @responses.activate
    def test_all_sources_failed_still_scores(self, la_location, default_config, caplog):
        responses.add(responses.GET, OPENAQ_URL, status=500)
        responses.add(responses.GET, USGS_URL, body=RequestsConnectionError("down"))
        responses.add(responses.GET, WEATHER_URL, status=401)

        with caplog.at_level(logging.ERROR, logger="city_pulse.pipeline"):
            result = run_query(la_location, default_config, rng=random.Random(1))

        assert result.all_sources_failed
        assert result.source_errors["weather"] == "Invalid API key for OpenWeatherMap"
        assert result.vitals.infections.status == "clean"
        assert result.vitals.blood_oxygen.status == "healthy"
        assert 0 <= result.diagnostic.overall_score <= 100
        assert "All upstream sources failed" in caplog.text


class TestQueryGuard:
    def test_stale_commit_rejected(self):
        guard = QueryGuard()
        first = guard.begin()
        second = guard.begin()

        assert not guard.is_current(first)
        assert guard.is_current(second)
        assert guard.commit(first, "old") is False
        assert guard.value is None
        assert guard.commit(second, "new") is True
        assert guard.value == "new"

    def test_ids_increase(self):
        guard = QueryGuard()
        ids = [guard.begin() for _ in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5
