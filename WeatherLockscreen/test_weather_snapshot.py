"""Tests for weather_snapshot module."""
import pytest
from weather_snapshot import (
    AstronomyInfo,
    CurrentConditions,
    DaySummary,
    HourlyPoint,
    MoonPhase,
    Temperature,
    WeatherSnapshot,
)


def _snapshot():
    return WeatherSnapshot(
        language="en",
        fetched_at=1700000000.0,
        current=CurrentConditions(
            temperature=Temperature(21.0, 69.8),
            condition="Sunny",
            icon="/tmp/icons/day_113.png",
            location="London",
            local_time="2024-11-18 14:30",
            humidity=64,
            wind_kph=13,
            wind_dir="WSW",
            feels_like=Temperature(20.4, 68.7),
        ),
        hourly_today=[HourlyPoint(hour=14, label="14:00", temperature=Temperature(17.0, 62.6))],
        forecast_days=[DaySummary(label="Today", high=Temperature(23.4, 74.1), low=Temperature(12.1, 53.8))],
        astronomy=AstronomyInfo(sunrise="07:21 AM", moon_phase=MoonPhase.WANING_GIBBOUS),
        is_cached=True,
    )


def test_snapshot_creation():
    """Test creating a snapshot with all sections."""
    snapshot = _snapshot()

    assert snapshot.is_valid()
    assert snapshot.has_icon()
    assert snapshot.current.temperature.celsius == 21.0
    assert snapshot.current.temperature.fahrenheit == 69.8
    assert snapshot.hourly_tomorrow == []


def test_snapshot_without_current_is_not_valid():
    snapshot = WeatherSnapshot(language="en", fetched_at=0.0)

    assert snapshot.is_valid() is False
    assert snapshot.has_icon() is False


def test_temperature_is_immutable():
    temperature = Temperature(21.0, 69.8)

    with pytest.raises(AttributeError):
        temperature.celsius = 25.0


def test_temperature_conversions():
    assert Temperature.from_celsius(100).fahrenheit == 212.0
    assert Temperature.from_fahrenheit(32).celsius == 0.0


def test_snapshot_dict_roundtrip_drops_cached_flag():
    """Serialized snapshots restore every field except is_cached."""
    original = _snapshot()

    data = original.to_dict()
    restored = WeatherSnapshot.from_dict(data)

    assert "is_cached" not in data
    assert restored.is_cached is False
    restored.is_cached = True
    assert restored == original


def test_snapshot_from_dict_rejects_malformed():
    with pytest.raises(KeyError):
        WeatherSnapshot.from_dict({"fetched_at": 1})
    with pytest.raises(TypeError):
        WeatherSnapshot.from_dict(["not", "a", "dict"])
    with pytest.raises(KeyError):
        WeatherSnapshot.from_dict({"language": "en", "current": {"condition": "Sunny"}})


@pytest.mark.parametrize("cls,data", [
    (Temperature, "hot"),
    (CurrentConditions, "x"),
    (HourlyPoint, ["14:00"]),
    (DaySummary, 3),
    (AstronomyInfo, "broken"),
])
def test_nested_from_dict_rejects_non_objects(cls, data):
    with pytest.raises(TypeError):
        cls.from_dict(data)


def test_snapshot_from_dict_rejects_non_object_sections():
    with pytest.raises(TypeError):
        WeatherSnapshot.from_dict({"language": "en", "current": "x"})
    with pytest.raises(TypeError):
        WeatherSnapshot.from_dict({
            "language": "en",
            "current": {"temperature": {"c": 21.0, "f": 69.8}, "condition": "Sunny"},
            "astronomy": "broken",
        })


@pytest.mark.parametrize("name,expected", [
    ("New Moon", MoonPhase.NEW_MOON),
    ("Waxing Crescent", MoonPhase.WAXING_CRESCENT),
    ("First Quarter", MoonPhase.FIRST_QUARTER),
    ("Waxing Gibbous", MoonPhase.WAXING_GIBBOUS),
    ("Full Moon", MoonPhase.FULL_MOON),
    ("Waning Gibbous", MoonPhase.WANING_GIBBOUS),
    ("Last Quarter", MoonPhase.LAST_QUARTER),
    ("Waning Crescent", MoonPhase.WANING_CRESCENT),
])
def test_moon_phase_canonical_names(name, expected):
    assert MoonPhase.from_provider(name) is expected


def test_moon_phase_third_quarter_is_last_quarter():
    assert MoonPhase.from_provider("Third Quarter") is MoonPhase.LAST_QUARTER
    assert MoonPhase.from_provider("  third   quarter ") is MoonPhase.LAST_QUARTER


def test_moon_phase_unknown_defaults_to_new_moon():
    assert MoonPhase.from_provider("Blue Moon") is MoonPhase.NEW_MOON
    assert MoonPhase.from_provider(None) is MoonPhase.NEW_MOON
    assert MoonPhase.from_provider(3) is MoonPhase.NEW_MOON
