"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
import random
from dataclasses import asdict
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from city_pulse import __version__
from city_pulse.config import CityPulseConfig
from city_pulse.geo import make_location
from city_pulse.pipeline import InvalidLocationError, QueryResult, run_query
from city_pulse.tester import get_health_summary, run_full_test_suite

app = typer.Typer(
    name="city-pulse",
    help="Urban health vitals from air quality, seismic and weather data.",
    add_completion=False,
)
console = Console()

_STATUS_STYLES: dict[str, str] = {
    "normal": "green",
    "healthy": "green",
    "strong": "green",
    "clean": "green",
    "excellent": "green",
    "good": "green",
    "elevated": "yellow",
    "fever": "yellow",
    "unhealthy": "yellow",
    "weak": "yellow",
    "infected": "yellow",
    "fair": "yellow",
    "degraded": "yellow",
    "poor": "dark_orange",
    "critical": "red",
    "hazardous": "red",
    "compromised": "red",
}


def _styled(status: str) -> str:
    style = _STATUS_STYLES.get(status)
    return f"[{style}]{status}[/{style}]" if style else status


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"city-pulse {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """CityPulse: urban health vitals for any coordinate."""


def _print_result(result: QueryResult) -> None:
    vitals = result.vitals
    sources = vitals.sources()

    console.print()
    place = ", ".join(p for p in (result.location.city, result.location.country) if p)
    title = f"City Vitals ({result.location.lat:.4f}, {result.location.lon:.4f})"
    if place:
        title += f" - {place}"
    table = Table(title=title)
    table.add_column("Vital", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status")
    table.add_column("Trend", style="dim")
    table.add_column("Source", style="dim")

    rows = [
        ("Heart Rate", f"{vitals.heart_rate.value:.0f} bpm", vitals.heart_rate.status,
         vitals.heart_rate.trend, "heart_rate"),
        ("Temperature", f"{vitals.temperature.value:.1f} °C", vitals.temperature.status,
         vitals.temperature.trend, "temperature"),
        ("Air Quality", f"AQI {vitals.blood_oxygen.value:.0f}", vitals.blood_oxygen.status,
         vitals.blood_oxygen.trend, "blood_oxygen"),
        ("Green Space", f"{vitals.immune_system.green_space_coverage:.0f}%",
         vitals.immune_system.status, vitals.immune_system.trend, "immune_system"),
        ("Hazards", str(vitals.infections.disaster_events + vitals.infections.pollution_hotspots),
         vitals.infections.status, "-", "infections"),
    ]
    for label, value, status, trend, key in rows:
        table.add_row(label, value, _styled(status), trend, sources[key].kind)
    console.print(table)

    health = vitals.overall_health
    console.print(
        f"\nOverall health: [bold]{health.score}[/bold]/100 ({_styled(health.status)}, "
        f"{result.diagnostic.severity} severity)"
    )
    console.print(health.diagnosis)
    console.print("\n[bold]Recommendations[/bold]")
    for rec in health.recommendations:
        console.print(f"  - {rec}")

    if result.all_sources_failed:
        console.print("\n[red]All data sources failed; showing default values.[/red]")
    elif result.source_errors:
        for service, error in result.source_errors.items():
            console.print(f"[yellow]{service} unavailable:[/yellow] {error}")
    console.print(f"Data quality score: {result.quality.overall_score}/100")


@app.command()
def check(
    lat: Annotated[float, typer.Option("--lat", help="Latitude in degrees.")],
    lon: Annotated[float, typer.Option("--lon", help="Longitude in degrees.")],
    mock: Annotated[
        bool,
        typer.Option("--mock", help="Use mock data instead of calling upstream APIs."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the full result as JSON."),
    ] = False,
    geocode: Annotated[
        bool,
        typer.Option("--geocode", help="Resolve the nearest city name offline."),
    ] = False,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed for synthetic values (reproducible output)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Compute vitals and a health diagnosis for one coordinate."""
    _configure_logging(verbose)

    config = CityPulseConfig(use_mock_data=True) if mock else CityPulseConfig()
    location = make_location(lat, lon, geocode=geocode)
    rng = random.Random(seed) if seed is not None else None

    try:
        result = run_query(location, config, rng=rng)
    except InvalidLocationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from None

    if as_json:
        typer.echo(json.dumps(asdict(result), indent=2))
        return
    _print_result(result)


@app.command("test-apis")
def test_apis(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Test every upstream API at a few reference cities."""
    _configure_logging(verbose)

    suite = run_full_test_suite(CityPulseConfig())
    summary = get_health_summary(suite.results)

    console.print()
    table = Table(title="API Test Results")
    table.add_column("Service", style="bold")
    table.add_column("Status")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Data", justify="center")
    table.add_column("Error", style="dim")

    for r in suite.results:
        status = {
            "success": "[green]success[/green]",
            "timeout": "[dark_orange]timeout[/dark_orange]",
            "error": "[red]error[/red]",
        }[r.status]
        table.add_row(
            r.service,
            status,
            str(r.response_time_ms),
            "yes" if r.data_received else "no",
            r.error_message or "",
        )

    console.print(table)
    console.print(f"\nOverall status: {_styled(suite.overall_status)}")
    console.print(f"Successful calls: {summary.healthy_apis}/{summary.total_apis}")
    console.print(f"Average response time: {summary.average_response_time_ms} ms")
