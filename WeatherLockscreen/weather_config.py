"""Configuration loading from the environment (and an optional .env file)."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from weather_service import DEFAULT_MAX_AGE, DEFAULT_MIN_DELAY, FetchContext

DEFAULT_LOCATION = "London"
DEFAULT_DATA_DIR = Path.home() / ".weather-lockscreen"

# Host UI locale -> WeatherAPI.com language code
LANG_MAP = {
    "ar": "ar",
    "bg_BG": "bg",
    "bn": "bn",
    "C": "en",
    "cs": "cs",
    "da": "da",
    "de": "de",
    "el": "el",
    "en_GB": "en",
    "en_US": "en",
    "es": "es",
    "fi": "fi",
    "fr": "fr",
    "hi": "hi",
    "hu": "hu",
    "it_IT": "it",
    "ja": "ja",
    "ko_KR": "ko",
    "nl_NL": "nl",
    "pl": "pl",
    "pt_PT": "pt",
    "pt_BR": "pt",  # WeatherAPI has a single Portuguese variant
    "ro": "ro",
    "ro_MD": "ro",
    "ru": "ru",
    "si": "si",
    "sk": "sk",
    "sr": "sr",
    "sv": "sv",
    "ta": "ta",
    "te": "te",
    "tr": "tr",
    "uk": "uk",
    "ur": "ur",
    "vi": "vi",
    "zh_CN": "zh",
    "zh_TW": "zh_tw",
    "jv": "jv",
    "mr": "mr",
    "pa": "pa",
    "zh_cmn": "zh_cmn",
    "zh_hsn": "zh_hsn",
    "zh_wuu": "zh_wuu",
    "zh_yue": "zh_yue",
    "zu": "zu",
}

_SUPPORTED_LANGUAGES = set(LANG_MAP.values())


def weatherapi_language(locale: Optional[str]) -> str:
    """Map a UI locale such as "pt_BR" or "de_AT.UTF-8" to a WeatherAPI language."""
    if not locale:
        return "en"
    locale = locale.split(".")[0]
    if locale in LANG_MAP:
        return LANG_MAP[locale]
    base = locale.split("_")[0]
    if base in LANG_MAP:
        return LANG_MAP[base]
    if base in _SUPPORTED_LANGUAGES:
        return base
    return "en"


@dataclass
class WeatherConfig:
    api_key: Optional[str]
    location: str = DEFAULT_LOCATION
    locale: str = "en"
    translate: bool = True
    min_delay: int = DEFAULT_MIN_DELAY
    max_age: int = DEFAULT_MAX_AGE
    twelve_hour_clock: bool = False
    temp_scale: str = "C"
    data_dir: Path = DEFAULT_DATA_DIR
    timeout: float = 10
    periodic_refresh: int = 0

    @property
    def language(self) -> str:
        return weatherapi_language(self.locale) if self.translate else "en"

    def fetch_context(self, force_refresh: bool = False, deadline: Optional[float] = None) -> FetchContext:
        return FetchContext(
            location=self.location,
            api_key=self.api_key,
            language=self.language,
            force_refresh=force_refresh,
            min_delay=self.min_delay,
            max_age=self.max_age,
            twelve_hour_clock=self.twelve_hour_clock,
            timeout=self.timeout,
            deadline=deadline,
        )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast=int):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        number = cast(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid {name}: {value!r}") from exc
    if number < 0:
        raise SystemExit(f"Invalid {name}: must not be negative")
    return number


def load_config() -> WeatherConfig:
    load_dotenv()
    temp_scale = (os.getenv("WEATHER_TEMP_SCALE") or "C").strip().upper()
    if temp_scale not in ("C", "F"):
        raise SystemExit(f"Invalid WEATHER_TEMP_SCALE: {temp_scale!r} (expected C or F)")

    config = WeatherConfig(
        api_key=(os.getenv("WEATHER_API_KEY") or "").strip() or None,
        location=(os.getenv("WEATHER_LOCATION") or "").strip() or DEFAULT_LOCATION,
        locale=os.getenv("WEATHER_LOCALE", "en"),
        translate=_env_bool("WEATHER_TRANSLATE", True),
        min_delay=_env_number("WEATHER_MIN_UPDATE_DELAY", DEFAULT_MIN_DELAY),
        max_age=_env_number("WEATHER_CACHE_MAX_AGE", DEFAULT_MAX_AGE),
        twelve_hour_clock=_env_bool("WEATHER_TWELVE_HOUR_CLOCK", False),
        temp_scale=temp_scale,
        data_dir=Path(os.getenv("WEATHER_DATA_DIR") or DEFAULT_DATA_DIR).expanduser(),
        timeout=_env_number("WEATHER_TIMEOUT", 10, float),
        periodic_refresh=_env_number("WEATHER_PERIODIC_REFRESH", 0),
    )

    logging.info(
        "Configuration loaded: location=%s lang=%s min_delay=%ss max_age=%ss api_key=%s",
        config.location,
        config.language,
        config.min_delay,
        config.max_age,
        "set" if config.api_key else "missing",
    )
    return config
