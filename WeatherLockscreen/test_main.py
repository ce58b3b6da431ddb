"""Tests for the command line entry point."""
import pytest
from unittest.mock import patch
import main
from weather_config import WeatherConfig
from weather_provider import WeatherProviderError
from weather_snapshot import (
    AstronomyInfo,
    CurrentConditions,
    DaySummary,
    MoonPhase,
    Temperature,
    WeatherSnapshot,
)


@pytest.fixture
def env(monkeypatch, tmp_path):
    for name in ("WEATHER_LOCALE", "WEATHER_TRANSLATE", "WEATHER_MIN_UPDATE_DELAY", "WEATHER_CACHE_MAX_AGE",
                 "WEATHER_TWELVE_HOUR_CLOCK", "WEATHER_TEMP_SCALE", "WEATHER_TIMEOUT",
                 "WEATHER_PERIODIC_REFRESH", "WEATHER_LOCATION"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("WEATHER_API_KEY", "test_key")
    monkeypatch.setenv("WEATHER_DATA_DIR", str(tmp_path / "data"))
    with patch("weather_config.load_dotenv"):
        yield monkeypatch


@pytest.fixture
def log_args(tmp_path):
    return ["--log-file", str(tmp_path / "test.log")]


def test_format_weather_lines():
    snapshot = WeatherSnapshot(
        language="en",
        fetched_at=0.0,
        current=CurrentConditions(
            temperature=Temperature(21.0, 69.8),
            condition="Sunny",
            location="London",
            local_time="2024-11-18 14:30",
            humidity=64,
            wind_kph=13,
            wind_dir="WSW",
            feels_like=Temperature(20.4, 68.7),
        ),
        forecast_days=[DaySummary(label="Today", high=Temperature(23.4, 74.1), low=Temperature(12.1, 53.8),
                                  condition="Sunny")],
        astronomy=AstronomyInfo(sunrise="07:21 AM", sunset="04:07 PM", moon_phase=MoonPhase.FULL_MOON),
        is_cached=True,
    )
    config = WeatherConfig(api_key=None, temp_scale="F")

    lines = main.format_weather_lines(snapshot, config)

    assert lines[0] == "London  Nov 18, 14:30 *"
    assert lines[1] == "69°F  Sunny"
    assert lines[2] == "Feels 68°F  Hum 64%  Wind 13 km/h WSW"
    assert lines[3] == "Today: 74° / 53°  Sunny"
    assert lines[4] == "Sunrise 07:21 AM  Sunset 04:07 PM  Moon Full Moon (full_moon.svg)"


def test_main_fetch_and_cache(env, log_args, minimal_response, capsys):
    with patch("main.WeatherAPIProvider") as provider_cls:
        provider = provider_cls.return_value
        provider.get_forecast.return_value = minimal_response
        provider.get_icon.side_effect = WeatherProviderError("offline")

        assert main.main(log_args) == 0
        assert main.main(log_args) == 0

    assert provider.get_forecast.call_count == 1
    out = capsys.readouterr().out
    assert "21°C  Sunny" in out
    assert "Nov 18, 14:30 *" in out


def test_main_total_failure(env, log_args, capsys):
    with patch("main.WeatherAPIProvider") as provider_cls:
        provider_cls.return_value.get_forecast.side_effect = WeatherProviderError("Network error")

        assert main.main(log_args) == 2

    assert "Weather unavailable" in capsys.readouterr().out


def test_main_clear_cache(env, log_args, tmp_path, capsys):
    cache_dir = tmp_path / "data" / "cache"
    cache_dir.mkdir(parents=True)
    (cache_dir / "weather-lockscreen.json").write_text("{}")

    assert main.main(log_args + ["--clear-cache"]) == 0
    assert main.main(log_args + ["--clear-cache"]) == 0

    out = capsys.readouterr().out
    assert "Weather cache cleared" in out
    assert "Weather cache already empty" in out


def test_main_search(env, log_args, capsys):
    with patch("main.WeatherAPIProvider") as provider_cls:
        provider_cls.return_value.search_locations.return_value = [
            {"name": "London", "region": "Ontario", "country": "Canada", "lat": 42.98, "lon": -81.25},
        ]

        assert main.main(log_args + ["--search", "London"]) == 0

    assert "London, Ontario, Canada" in capsys.readouterr().out


def test_main_search_failure(env, log_args):
    with patch("main.WeatherAPIProvider") as provider_cls:
        provider_cls.return_value.search_locations.side_effect = WeatherProviderError("HTTP 400")

        assert main.main(log_args + ["--search", "London"]) == 1


def test_main_search_requires_api_key(env, log_args):
    env.delenv("WEATHER_API_KEY")

    assert main.main(log_args + ["--search", "London"]) == 1
