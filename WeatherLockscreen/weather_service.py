"""Weather fetcher with persistent caching and rate limiting."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from cache_store import CacheStore
from normalize import IconResolver, normalize_response
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_snapshot import WeatherSnapshot

DEFAULT_MIN_DELAY = 1800  # 30 minutes
DEFAULT_MAX_AGE = 3600  # 1 hour
FORECAST_DAYS = 2


@dataclass
class FetchContext:
    """Per-call inputs of WeatherFetcher.fetch_weather_data."""
    location: str
    api_key: Optional[str] = None
    language: str = "en"
    force_refresh: bool = False
    min_delay: float = DEFAULT_MIN_DELAY
    max_age: float = DEFAULT_MAX_AGE
    twelve_hour_clock: bool = False
    timeout: float = 10
    deadline: Optional[float] = None  # absolute clock time; network calls stop here


class WeatherFetcher:
    """
    Decides between cached and fresh weather, and falls back to the cache.

    Lookup order for one call:
      1. unless forced, a cached snapshot younger than ``min_delay`` in the
         requested language
      2. without an API key, any cached snapshot younger than ``max_age``
      3. a fresh forecast from the provider, saved to the cache
      4. any cached snapshot younger than ``max_age``
    None means nothing usable exists; callers show a time-of-day icon.

    Failed requests are not retried here; the next scheduled call retries.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache_store: CacheStore,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize weather fetcher.

        Args:
            provider: Weather provider to use
            cache_store: Persistent snapshot and icon cache
            clock: Returns the current UNIX time
        """
        self.provider = provider
        self.cache_store = cache_store
        self.clock = clock

    def fetch_weather_data(self, context: FetchContext) -> Optional[WeatherSnapshot]:
        """
        Get the weather snapshot to display.

        Returns:
            WeatherSnapshot: Fresh or cached snapshot (see ``is_cached``),
            or None if neither the provider nor the cache has usable data
        """
        logging.debug(
            f"Fetching weather: location={context.location}, lang={context.language}, "
            f"force={context.force_refresh}"
        )

        if not context.force_refresh:
            cached = self.cache_store.load(context.min_delay)
            if cached is not None and cached.language == context.language:
                logging.debug("Using cache to avoid repeated requests")
                cached.is_cached = True
                return cached

        if not context.api_key:
            logging.warning("No API key configured")
            return self._fallback(context)

        timeout = self._request_timeout(context)
        if timeout is None:
            logging.warning("Deadline passed before the weather request")
            return self._fallback(context)

        try:
            raw = self.provider.get_forecast(
                context.location,
                context.api_key,
                language=context.language,
                days=FORECAST_DAYS,
                timeout=timeout,
            )
        except WeatherProviderError as e:
            logging.warning(f"Weather fetch failed: {e}")
            return self._fallback(context)

        fetched_at = self.clock()
        try:
            snapshot = normalize_response(
                raw,
                language=context.language,
                fetched_at=fetched_at,
                twelve_hour_clock=context.twelve_hour_clock,
                icon_resolver=self._icon_resolver(context),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logging.warning(f"Failed to process weather data: {e}")
            return self._fallback(context)

        logging.info(f"Weather data received: {snapshot.current.temperature.celsius}°C, {snapshot.current.condition}")
        if not self.cache_store.save(snapshot):
            logging.warning("Weather data could not be cached; returning it anyway")
        snapshot.is_cached = False
        context.force_refresh = False
        return snapshot

    def _fallback(self, context: FetchContext) -> Optional[WeatherSnapshot]:
        cached = self.cache_store.load(context.max_age)
        if cached is None:
            logging.warning("No usable cached weather data")
            return None
        age = self.clock() - cached.fetched_at
        logging.info(f"Using cached weather data (age: {age:.0f}s)")
        cached.is_cached = True
        return cached

    def _request_timeout(self, context: FetchContext) -> Optional[float]:
        """Per-request timeout bounded by the deadline; None once it has passed."""
        if context.deadline is None:
            return context.timeout
        remaining = context.deadline - self.clock()
        if remaining <= 0:
            return None
        return min(context.timeout, remaining)

    def _icon_resolver(self, context: FetchContext) -> IconResolver:
        resolved: Dict[str, Optional[str]] = {}

        def resolve(icon_ref: str) -> Optional[str]:
            if icon_ref not in resolved:
                cached = self.cache_store.icon_path(icon_ref)
                if cached is not None and cached.is_file():
                    resolved[icon_ref] = str(cached)
                else:
                    timeout = self._request_timeout(context)
                    resolved[icon_ref] = (
                        self.cache_store.get_or_fetch_icon(icon_ref, timeout=timeout)
                        if timeout is not None
                        else None
                    )
            return resolved[icon_ref]

        return resolve
