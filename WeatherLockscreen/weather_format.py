"""Text formatting helpers shared by the display templates."""
import math
from datetime import datetime
from typing import Optional

from weather_snapshot import DaySummary, MoonPhase, Temperature


def format_hour_label(hour: int, twelve_hour_clock: bool = False) -> str:
    """Label an hour of the day: 0 -> "12 AM", 13 -> "1 PM", or "13:00"."""
    if not twelve_hour_clock:
        return f"{hour}:00"
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def format_temp(temperature: Optional[Temperature], scale: str = "C", with_unit: bool = True) -> Optional[str]:
    """Render a temperature in the given scale, floored: "21°C", "69°F" or "21°"."""
    if temperature is None:
        return None
    if scale.upper() == "F":
        value, unit = temperature.fahrenheit, "°F"
    else:
        value, unit = temperature.celsius, "°C"
    return f"{math.floor(value)}{unit if with_unit else '°'}"


def format_high_low(day: Optional[DaySummary], scale: str = "C") -> Optional[str]:
    if day is None:
        return None
    return f"{format_temp(day.high, scale, with_unit=False)} / {format_temp(day.low, scale, with_unit=False)}"


def moon_phase_icon(phase: Optional[MoonPhase]) -> Optional[str]:
    """Bundled svg filename for a moon phase, e.g. "waxing_gibbous.svg"."""
    if phase is None:
        return None
    return phase.name.lower() + ".svg"


def format_header_time(local_time: Optional[str], twelve_hour_clock: bool = False, is_cached: bool = False) -> str:
    """
    Format the provider's "YYYY-MM-DD HH:MM" local time for a header line.

    Produces "Nov 18, 14:30" (or "Nov 18, 2:30 PM"); unparseable input is
    shown as-is. A trailing " *" marks data served from the cache.
    """
    if not local_time:
        text = ""
    else:
        try:
            moment = datetime.strptime(local_time.strip(), "%Y-%m-%d %H:%M")
        except ValueError:
            text = local_time
        else:
            if twelve_hour_clock:
                display_hour = moment.hour % 12 or 12
                period = "PM" if moment.hour >= 12 else "AM"
                clock = f"{display_hour}:{moment.minute:02d} {period}"
            else:
                clock = f"{moment.hour:02d}:{moment.minute:02d}"
            text = f"{moment.strftime('%b')} {moment.day:02d}, {clock}"
    if is_cached:
        text += " *"
    return text
