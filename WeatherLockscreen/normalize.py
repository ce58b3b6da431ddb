"""Normalize raw WeatherAPI.com forecast documents into WeatherSnapshot."""
import logging
import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from weather_format import format_hour_label
from weather_snapshot import (
    AstronomyInfo,
    CurrentConditions,
    DaySummary,
    HourlyPoint,
    MoonPhase,
    Temperature,
    WeatherSnapshot,
)

IconResolver = Callable[[str], Optional[str]]

MAX_FORECAST_DAYS = 3

_HOUR_PATTERN = re.compile(r"(\d{1,2}):00$")


def _temperature(block: Dict[str, Any], prefix: str) -> Optional[Temperature]:
    """Read ``<prefix>_c``/``<prefix>_f``, deriving whichever one is missing."""
    celsius = block.get(f"{prefix}_c")
    fahrenheit = block.get(f"{prefix}_f")
    if celsius is not None and fahrenheit is not None:
        return Temperature(celsius=float(celsius), fahrenheit=float(fahrenheit))
    if celsius is not None:
        return Temperature.from_celsius(float(celsius))
    if fahrenheit is not None:
        return Temperature.from_fahrenheit(float(fahrenheit))
    return None


def _condition(block: Dict[str, Any]) -> Dict[str, Any]:
    condition = block.get("condition")
    return condition if isinstance(condition, dict) else {}


def _resolve(resolver: Optional[IconResolver], icon_ref: Optional[str]) -> Optional[str]:
    if resolver is None or not icon_ref:
        return None
    return resolver(icon_ref)


def day_label(index: int, date_str: Optional[str]) -> str:
    """
    Label the 1-based forecast day ``index``.

    Day 1 is "Today", day 2 "Tomorrow"; later days use the abbreviated
    weekday name of the provider date in the current locale.
    """
    if index == 1:
        return "Today"
    if index == 2:
        return "Tomorrow"
    if date_str:
        try:
            return datetime.strptime(date_str, "%Y-%m-%d").strftime("%a")
        except ValueError:
            logging.debug(f"Unparseable forecast date: {date_str!r}")
    return f"Day {index}"


def _hourly(day: Dict[str, Any], twelve_hour_clock: bool, resolver: Optional[IconResolver]) -> List[HourlyPoint]:
    points = []
    for hour_data in day.get("hour") or []:
        match = _HOUR_PATTERN.search(str(hour_data.get("time", "")))
        temperature = _temperature(hour_data, "temp")
        if not match or temperature is None:
            continue
        hour = int(match.group(1))
        condition = _condition(hour_data)
        points.append(
            HourlyPoint(
                hour=hour,
                label=format_hour_label(hour, twelve_hour_clock),
                temperature=temperature,
                icon=_resolve(resolver, condition.get("icon")),
                condition=condition.get("text"),
            )
        )
    return points


def _forecast_days(forecast_days: List[Dict[str, Any]], resolver: Optional[IconResolver]) -> List[DaySummary]:
    days = []
    for index, day_data in enumerate(forecast_days[:MAX_FORECAST_DAYS], start=1):
        day = day_data.get("day")
        if not isinstance(day, dict):
            continue
        high = _temperature(day, "maxtemp")
        low = _temperature(day, "mintemp")
        if high is None or low is None:
            continue
        condition = _condition(day)
        days.append(
            DaySummary(
                label=day_label(index, day_data.get("date")),
                high=high,
                low=low,
                icon=_resolve(resolver, condition.get("icon")),
                condition=condition.get("text"),
                date=day_data.get("date"),
            )
        )
    return days


def _astronomy(day_data: Dict[str, Any]) -> Optional[AstronomyInfo]:
    astro = day_data.get("astro")
    if not isinstance(astro, dict):
        return None
    return AstronomyInfo(
        sunrise=astro.get("sunrise"),
        sunset=astro.get("sunset"),
        moonrise=astro.get("moonrise"),
        moonset=astro.get("moonset"),
        moon_phase=MoonPhase.from_provider(astro.get("moon_phase")),
    )


def normalize_response(
    raw: Dict[str, Any],
    language: str,
    fetched_at: float,
    twelve_hour_clock: bool = False,
    icon_resolver: Optional[IconResolver] = None,
) -> WeatherSnapshot:
    """
    Build a WeatherSnapshot from a forecast.json document.

    Args:
        raw: Decoded provider response
        language: Language the text fields were requested in
        fetched_at: UNIX time the response was received
        twelve_hour_clock: Produce "1 PM" style hour labels instead of "13:00"
        icon_resolver: Maps a provider icon URL to a local file path

    Raises:
        ValueError: If the current conditions lack a temperature
        KeyError, TypeError: If the document structure is malformed
    """
    current_raw = raw["current"]
    temperature = _temperature(current_raw, "temp")
    if temperature is None:
        raise ValueError("current conditions carry no temperature")

    condition = _condition(current_raw)
    location = raw.get("location") or {}
    wind_kph = current_raw.get("wind_kph")
    humidity = current_raw.get("humidity")

    current = CurrentConditions(
        temperature=temperature,
        condition=condition.get("text", ""),
        icon=_resolve(icon_resolver, condition.get("icon")),
        location=location.get("name"),
        local_time=location.get("localtime")
        or datetime.fromtimestamp(fetched_at).strftime("%Y-%m-%d %H:%M"),
        humidity=int(humidity) if humidity is not None else None,
        wind_kph=math.floor(wind_kph) if wind_kph is not None else None,
        wind_dir=current_raw.get("wind_dir"),
        feels_like=_temperature(current_raw, "feelslike"),
    )

    forecast_days = (raw.get("forecast") or {}).get("forecastday") or []
    hourly_today = _hourly(forecast_days[0], twelve_hour_clock, icon_resolver) if len(forecast_days) > 0 else []
    hourly_tomorrow = _hourly(forecast_days[1], twelve_hour_clock, icon_resolver) if len(forecast_days) > 1 else []

    return WeatherSnapshot(
        language=language,
        fetched_at=fetched_at,
        current=current,
        hourly_today=hourly_today,
        hourly_tomorrow=hourly_tomorrow,
        forecast_days=_forecast_days(forecast_days, icon_resolver),
        astronomy=_astronomy(forecast_days[0]) if forecast_days else None,
    )
