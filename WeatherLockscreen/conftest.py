"""Shared fixtures: WeatherAPI.com sample documents and a fake clock."""
import io

import pytest
from PIL import Image


def _hours(date, base_temp_c, variant="day"):
    hours = []
    for hour in range(24):
        temp_c = base_temp_c + hour / 2
        hours.append({
            "time": f"{date} {hour:02d}:00",
            "temp_c": temp_c,
            "temp_f": round(temp_c * 9 / 5 + 32, 1),
            "condition": {
                "text": "Partly cloudy",
                "icon": f"//cdn.weatherapi.com/weather/64x64/{variant}/116.png",
            },
        })
    return hours


@pytest.fixture
def forecast_response():
    """Forecast document as returned by forecast.json?days=2."""
    return {
        "location": {
            "name": "London",
            "region": "City of London, Greater London",
            "country": "United Kingdom",
            "localtime": "2024-11-18 14:30",
        },
        "current": {
            "temp_c": 21.0,
            "temp_f": 69.8,
            "condition": {"text": "Sunny", "icon": "//cdn.weatherapi.com/weather/64x64/day/113.png"},
            "wind_kph": 13.7,
            "wind_dir": "WSW",
            "humidity": 64,
            "feelslike_c": 20.4,
            "feelslike_f": 68.7,
        },
        "forecast": {
            "forecastday": [
                {
                    "date": "2024-11-18",
                    "day": {
                        "maxtemp_c": 23.4,
                        "maxtemp_f": 74.1,
                        "mintemp_c": 12.1,
                        "mintemp_f": 53.8,
                        "condition": {"text": "Sunny", "icon": "//cdn.weatherapi.com/weather/64x64/day/113.png"},
                    },
                    "astro": {
                        "sunrise": "07:21 AM",
                        "sunset": "04:07 PM",
                        "moonrise": "05:48 PM",
                        "moonset": "10:52 AM",
                        "moon_phase": "Waning Gibbous",
                    },
                    "hour": _hours("2024-11-18", 10.0),
                },
                {
                    "date": "2024-11-19",
                    "day": {
                        "maxtemp_c": 18.0,
                        "maxtemp_f": 64.4,
                        "mintemp_c": 9.5,
                        "mintemp_f": 49.1,
                        "condition": {"text": "Light rain", "icon": "//cdn.weatherapi.com/weather/64x64/day/296.png"},
                    },
                    "astro": {"moon_phase": "Waning Gibbous"},
                    "hour": _hours("2024-11-19", 8.0),
                },
            ]
        },
    }


@pytest.fixture
def minimal_response():
    """The smallest document the fetcher accepts."""
    return {
        "current": {
            "temp_c": 21,
            "temp_f": 69.8,
            "condition": {"text": "Sunny", "icon": "//cdn/64x64/day/113.png"},
        },
        "location": {"name": "London", "localtime": "2024-11-18 14:30"},
    }


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 200, 0, 255)).save(buf, format="PNG")
    return buf.getvalue()


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
