"""Tests for the live API test harness."""

from __future__ import annotations

import pytest
import responses
from requests.exceptions import Timeout

from city_pulse.config import CityPulseConfig
from city_pulse.tester import (
    APITestResult,
    determine_overall_status,
    get_health_summary,
    run_full_test_suite,
    test_single_api,
)

OPENAQ_URL = "https://api.openaq.org/v1/latest"
USGS_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


def _result(status: str, ms: int = 100) -> APITestResult:
    return APITestResult("svc", status, ms, status == "success")


class TestSingleApi:
    @responses.activate
    def test_success(self, default_config, sample_openaq_response):
        responses.add(responses.GET, OPENAQ_URL, json=sample_openaq_response, status=200)
        result = test_single_api("air_quality", 34.0, -118.0, default_config)
        assert result.service == "OpenAQ Air Quality"
        assert result.status == "success"
        assert result.data_received is True
        assert result.error_message is None
        assert result.response_time_ms >= 0

    @responses.activate
    def test_success_without_stations(self, default_config):
        responses.add(responses.GET, OPENAQ_URL, json={"results": []}, status=200)
        result = test_single_api("air_quality", 0, 0, default_config)
        assert result.status == "success"
        assert result.data_received is False

    @responses.activate
    def test_timeout(self, default_config):
        responses.add(responses.GET, USGS_URL, body=Timeout("slow"))
        result = test_single_api("earthquake", 0, 0, default_config)
        assert result.status == "timeout"
        assert result.error_message == "Network error: Unable to reach earthquake service"

    @responses.activate
    def test_error(self):
        result = test_single_api("weather", 0, 0, CityPulseConfig(openweather_api_key=""))
        assert result.service == "OpenWeatherMap"
        assert result.status == "error"
        assert result.data_received is False

    def test_unknown_service(self, default_config):
        with pytest.raises(ValueError, match="Unknown service"):
            test_single_api("traffic", 0, 0, default_config)


class TestFullSuite:
    @responses.activate
    def test_runs_every_service_per_city(
        self,
        default_config,
        sample_openaq_response,
        sample_usgs_response,
        sample_weather_response,
    ):
        responses.add(responses.GET, OPENAQ_URL, json=sample_openaq_response, status=200)
        responses.add(responses.GET, USGS_URL, json=sample_usgs_response, status=200)
        responses.add(responses.GET, WEATHER_URL, json=sample_weather_response, status=200)
        delays: list[float] = []

        suite = run_full_test_suite(default_config, sleep=delays.append)

        assert len(suite.results) == 9
        assert all(r.status == "success" for r in suite.results)
        assert suite.overall_status == "healthy"
        assert delays == [0.0, 0.0, 0.0]
        assert suite.timestamp > 0


class TestStatusAndSummary:
    def test_overall_status_bands(self):
        assert determine_overall_status([_result("success")] * 4 + [_result("error")]) == "healthy"
        assert determine_overall_status([_result("success")] + [_result("error")]) == "degraded"
        assert determine_overall_status([_result("success")] + [_result("error")] * 2) == "critical"
        assert determine_overall_status([]) == "critical"

    def test_health_summary(self):
        results = [
            _result("success", 100),
            _result("success", 300),
            _result("error", 50),
            _result("timeout", 12_000),
        ]
        summary = get_health_summary(results)
        assert summary.total_apis == 4
        assert summary.healthy_apis == 2
        assert summary.degraded_apis == 1
        assert summary.critical_apis == 1
        assert summary.average_response_time_ms == 200
