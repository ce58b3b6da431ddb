"""Weather domain model - display-agnostic snapshot of one forecast fetch."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class MoonPhase(Enum):
    """The eight canonical moon phases, valued by their English names."""
    NEW_MOON = "New Moon"
    WAXING_CRESCENT = "Waxing Crescent"
    FIRST_QUARTER = "First Quarter"
    WAXING_GIBBOUS = "Waxing Gibbous"
    FULL_MOON = "Full Moon"
    WANING_GIBBOUS = "Waning Gibbous"
    LAST_QUARTER = "Last Quarter"
    WANING_CRESCENT = "Waning Crescent"

    @classmethod
    def from_provider(cls, name: Optional[str]) -> "MoonPhase":
        """
        Map a provider moon phase string to a canonical phase.

        Matching ignores case and surrounding whitespace. "Third Quarter" is
        accepted as a synonym of "Last Quarter". Anything unrecognized maps
        to NEW_MOON.
        """
        if not isinstance(name, str):
            return cls.NEW_MOON
        key = " ".join(name.split()).lower()
        for phase in cls:
            if phase.value.lower() == key:
                return phase
        return _PHASE_ALIASES.get(key, cls.NEW_MOON)


_PHASE_ALIASES = {
    "third quarter": MoonPhase.LAST_QUARTER,
}


def _require_object(data: Any, kind: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{kind} data must be an object")
    return data


@dataclass(frozen=True)
class Temperature:
    """A temperature carried in both scales, as reported by the provider."""
    celsius: float
    fahrenheit: float

    @classmethod
    def from_celsius(cls, celsius: float) -> "Temperature":
        return cls(celsius=celsius, fahrenheit=round(celsius * 9 / 5 + 32, 1))

    @classmethod
    def from_fahrenheit(cls, fahrenheit: float) -> "Temperature":
        return cls(celsius=round((fahrenheit - 32) * 5 / 9, 1), fahrenheit=fahrenheit)

    def to_dict(self) -> Dict[str, float]:
        return {"c": self.celsius, "f": self.fahrenheit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Temperature":
        _require_object(data, "Temperature")
        return cls(celsius=float(data["c"]), fahrenheit=float(data["f"]))


def _temp_or_none(data: Optional[Dict[str, Any]]) -> Optional[Temperature]:
    return Temperature.from_dict(data) if data is not None else None


@dataclass
class CurrentConditions:
    """Current conditions block. Only temperature and condition are required."""
    temperature: Temperature
    condition: str
    icon: Optional[str] = None  # local path of the cached icon file
    location: Optional[str] = None
    local_time: Optional[str] = None  # "YYYY-MM-DD HH:MM" in the location's timezone
    humidity: Optional[int] = None  # percent
    wind_kph: Optional[int] = None
    wind_dir: Optional[str] = None  # compass point, e.g. "NNE"
    feels_like: Optional[Temperature] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature.to_dict(),
            "condition": self.condition,
            "icon": self.icon,
            "location": self.location,
            "local_time": self.local_time,
            "humidity": self.humidity,
            "wind_kph": self.wind_kph,
            "wind_dir": self.wind_dir,
            "feels_like": self.feels_like.to_dict() if self.feels_like else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CurrentConditions":
        _require_object(data, "CurrentConditions")
        return cls(
            temperature=Temperature.from_dict(data["temperature"]),
            condition=data["condition"],
            icon=data.get("icon"),
            location=data.get("location"),
            local_time=data.get("local_time"),
            humidity=data.get("humidity"),
            wind_kph=data.get("wind_kph"),
            wind_dir=data.get("wind_dir"),
            feels_like=_temp_or_none(data.get("feels_like")),
        )


@dataclass
class HourlyPoint:
    hour: int  # 0-23
    label: str  # "2 PM" or "14:00"
    temperature: Temperature
    icon: Optional[str] = None
    condition: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": self.hour,
            "label": self.label,
            "temperature": self.temperature.to_dict(),
            "icon": self.icon,
            "condition": self.condition,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HourlyPoint":
        _require_object(data, "HourlyPoint")
        return cls(
            hour=int(data["hour"]),
            label=data["label"],
            temperature=Temperature.from_dict(data["temperature"]),
            icon=data.get("icon"),
            condition=data.get("condition"),
        )


@dataclass
class DaySummary:
    label: str  # "Today", "Tomorrow" or an abbreviated weekday
    high: Temperature
    low: Temperature
    icon: Optional[str] = None
    condition: Optional[str] = None
    date: Optional[str] = None  # provider date, "YYYY-MM-DD"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "high": self.high.to_dict(),
            "low": self.low.to_dict(),
            "icon": self.icon,
            "condition": self.condition,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaySummary":
        _require_object(data, "DaySummary")
        return cls(
            label=data["label"],
            high=Temperature.from_dict(data["high"]),
            low=Temperature.from_dict(data["low"]),
            icon=data.get("icon"),
            condition=data.get("condition"),
            date=data.get("date"),
        )


@dataclass
class AstronomyInfo:
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    moonrise: Optional[str] = None
    moonset: Optional[str] = None
    moon_phase: MoonPhase = MoonPhase.NEW_MOON

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sunrise": self.sunrise,
            "sunset": self.sunset,
            "moonrise": self.moonrise,
            "moonset": self.moonset,
            "moon_phase": self.moon_phase.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AstronomyInfo":
        _require_object(data, "AstronomyInfo")
        return cls(
            sunrise=data.get("sunrise"),
            sunset=data.get("sunset"),
            moonrise=data.get("moonrise"),
            moonset=data.get("moonset"),
            moon_phase=MoonPhase.from_provider(data.get("moon_phase")),
        )


@dataclass
class WeatherSnapshot:
    """
    One normalized weather payload, the only structure renderers consume.

    A snapshot without ``current`` is not displayable; renderers fall back
    to a generic time-of-day icon in that case.
    """
    language: str
    fetched_at: float  # UNIX timestamp of the successful API call
    current: Optional[CurrentConditions] = None
    hourly_today: List[HourlyPoint] = field(default_factory=list)
    hourly_tomorrow: List[HourlyPoint] = field(default_factory=list)
    forecast_days: List[DaySummary] = field(default_factory=list)
    astronomy: Optional[AstronomyInfo] = None
    is_cached: bool = False

    def is_valid(self) -> bool:
        return self.current is not None

    def has_icon(self) -> bool:
        return self.current is not None and bool(self.current.icon)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the on-disk cache. ``is_cached`` is not persisted."""
        return {
            "language": self.language,
            "fetched_at": self.fetched_at,
            "current": self.current.to_dict() if self.current else None,
            "hourly_today": [h.to_dict() for h in self.hourly_today],
            "hourly_tomorrow": [h.to_dict() for h in self.hourly_tomorrow],
            "forecast_days": [d.to_dict() for d in self.forecast_days],
            "astronomy": self.astronomy.to_dict() if self.astronomy else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherSnapshot":
        """
        Rebuild a snapshot from ``to_dict`` output.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed
        """
        _require_object(data, "WeatherSnapshot")
        current = data.get("current")
        astronomy = data.get("astronomy")
        return cls(
            language=data["language"],
            fetched_at=float(data.get("fetched_at", 0.0)),
            current=CurrentConditions.from_dict(current) if current is not None else None,
            hourly_today=[HourlyPoint.from_dict(h) for h in data.get("hourly_today", [])],
            hourly_tomorrow=[HourlyPoint.from_dict(h) for h in data.get("hourly_tomorrow", [])],
            forecast_days=[DaySummary.from_dict(d) for d in data.get("forecast_days", [])],
            astronomy=AstronomyInfo.from_dict(astronomy) if astronomy is not None else None,
        )
