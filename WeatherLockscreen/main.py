"""Weather lockscreen data fetcher: command line entry point."""
import argparse
import logging
import signal
import sys
import time
from typing import Optional, Tuple

from cache_store import CacheStore
from weather_config import WeatherConfig, load_config
from weather_format import format_header_time, format_high_low, format_temp, moon_phase_icon
from weather_provider import WeatherProviderError
from weather_service import WeatherFetcher
from weather_snapshot import WeatherSnapshot
from weatherapi_provider import WeatherAPIProvider

DEFAULT_LOG_FILE = "weather-lockscreen.log"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Weather lockscreen data fetcher")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--force", action="store_true", help="Ignore the update delay and fetch now")
    parser.add_argument("--refresh", type=float, default=None,
                        help="Seconds between refreshes (overrides WEATHER_PERIODIC_REFRESH)")
    parser.add_argument("--deadline", type=float, default=None,
                        help="Give up on network requests after this many seconds")
    parser.add_argument("--clear-cache", action="store_true", help="Remove cached weather data and icons")
    parser.add_argument("--search", metavar="QUERY", help="Search locations and exit")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def build_fetcher(config: WeatherConfig) -> WeatherFetcher:
    provider = WeatherAPIProvider(timeout=config.timeout)
    cache_store = CacheStore(config.data_dir, provider=provider, icon_timeout=config.timeout)
    fetcher = WeatherFetcher(provider=provider, cache_store=cache_store)
    logging.info("Weather fetcher ready (cache dir=%s)", cache_store.cache_dir)
    return fetcher


def format_weather_lines(snapshot: WeatherSnapshot, config: WeatherConfig) -> Tuple[str, ...]:
    current = snapshot.current
    header = f"{current.location or config.location}  " + format_header_time(
        current.local_time, config.twelve_hour_clock, snapshot.is_cached
    )
    now = f"{format_temp(current.temperature, config.temp_scale)}  {current.condition}"
    details = []
    if current.feels_like is not None:
        details.append(f"Feels {format_temp(current.feels_like, config.temp_scale)}")
    if current.humidity is not None:
        details.append(f"Hum {current.humidity}%")
    if current.wind_kph is not None:
        details.append(f"Wind {current.wind_kph} km/h {current.wind_dir or ''}".rstrip())
    lines = [header, now, "  ".join(details)]
    for day in snapshot.forecast_days:
        lines.append(f"{day.label}: {format_high_low(day, config.temp_scale)}  {day.condition or ''}".rstrip())
    if snapshot.astronomy is not None:
        astro = snapshot.astronomy
        lines.append(
            f"Sunrise {astro.sunrise}  Sunset {astro.sunset}  "
            f"Moon {astro.moon_phase.value} ({moon_phase_icon(astro.moon_phase)})"
        )
    return tuple(lines)


def show_weather(snapshot: Optional[WeatherSnapshot], config: WeatherConfig) -> None:
    if snapshot is None or not snapshot.is_valid():
        logging.warning("No weather data available, showing time-of-day fallback")
        print("Weather unavailable")
        return
    for line in format_weather_lines(snapshot, config):
        print(line)


def search_locations(query: str, config: WeatherConfig) -> int:
    if not config.api_key:
        logging.error("Missing WEATHER_API_KEY in environment")
        return 1
    provider = WeatherAPIProvider(timeout=config.timeout)
    try:
        locations = provider.search_locations(query, config.api_key)
    except WeatherProviderError as err:
        logging.error("Location search failed: %s", err)
        return 1
    if not locations:
        print(f"No locations found for '{query}'")
        return 0
    for loc in locations:
        print(f"{loc['name']}, {loc['region']}, {loc['country']}  ({loc['lat']},{loc['lon']})")
    return 0


def refresh_loop(fetcher: WeatherFetcher, config: WeatherConfig, interval: float, deadline: Optional[float]) -> None:
    frame = 0
    while True:
        frame += 1
        logging.info("Refresh %s: fetching weather", frame)
        # Scheduled refreshes behave like a wake-up: always hit the network.
        context = config.fetch_context(
            force_refresh=True,
            deadline=fetcher.clock() + deadline if deadline else None,
        )
        show_weather(fetcher.fetch_weather_data(context), config)
        time.sleep(max(interval, 1.0))


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config()

    if args.search:
        return search_locations(args.search, config)

    fetcher = build_fetcher(config)

    if args.clear_cache:
        if fetcher.cache_store.clear():
            print("Weather cache cleared")
        else:
            print("Weather cache already empty")
        return 0

    interval = args.refresh if args.refresh is not None else config.periodic_refresh
    if interval:
        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
        try:
            refresh_loop(fetcher, config, interval, args.deadline)
        except KeyboardInterrupt:
            logging.info("Stopping refresh loop")
        return 0

    context = config.fetch_context(
        force_refresh=args.force,
        deadline=fetcher.clock() + args.deadline if args.deadline else None,
    )
    snapshot = fetcher.fetch_weather_data(context)
    show_weather(snapshot, config)
    return 0 if snapshot is not None else 2


if __name__ == "__main__":
    sys.exit(main())
