"""On-disk cache for the last weather snapshot and downloaded icons."""
import io
import json
import logging
import os
import re
import shutil
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import urlparse

from PIL import Image

from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_snapshot import WeatherSnapshot

CACHE_FILENAME = "weather-lockscreen.json"
ICON_DIRNAME = "weather-icons"

_SAFE_FILENAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def icon_cache_key(icon_ref: Optional[str]) -> Optional[str]:
    """
    Derive the local icon filename for a provider icon reference.

    ``//cdn.weatherapi.com/weather/64x64/night/113.png`` becomes
    ``night_113.png``; a reference with a single path segment keeps the bare
    filename. Malformed or unsafe references yield None.
    """
    if not icon_ref or not isinstance(icon_ref, str):
        return None
    url = icon_ref.strip()
    if url.startswith("//"):
        url = "https:" + url
    try:
        path = urlparse(url).path
    except ValueError:
        return None

    segments = [s for s in path.split("/") if s]
    if not segments:
        return None
    filename = segments[-1]
    if not _SAFE_FILENAME.match(filename):
        return None
    if len(segments) >= 2:
        variant = segments[-2]
        if not _SAFE_FILENAME.match(variant):
            return None
        return f"{variant}_{filename}"
    return filename


class CacheStore:
    """
    Single-slot weather cache plus a content-addressed icon directory.

    Layout under ``data_dir``::

        cache/weather-lockscreen.json   {"timestamp": <unix>, "data": {...}}
        cache/weather-icons/<day|night>_<file>

    The record file is replaced atomically, so readers see either the old
    or the new record in full. All public operations hold one lock.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        provider: Optional[WeatherProviderBase] = None,
        clock: Callable[[], float] = time.time,
        icon_timeout: float = 10,
    ):
        """
        Initialize cache store.

        Args:
            data_dir: Application data directory
            provider: Provider used to download icons (None disables downloads)
            clock: Returns the current UNIX time
            icon_timeout: Default icon download timeout in seconds
        """
        self.cache_dir = Path(data_dir) / "cache"
        self.cache_file = self.cache_dir / CACHE_FILENAME
        self.icon_dir = self.cache_dir / ICON_DIRNAME
        self.provider = provider
        self.clock = clock
        self.icon_timeout = icon_timeout
        self._lock = threading.Lock()

    def save(self, snapshot: WeatherSnapshot) -> bool:
        """
        Persist the snapshot as the single cache record.

        Returns:
            bool: True on success, False if the record could not be written
        """
        with self._lock:
            record = {"timestamp": int(self.clock()), "data": snapshot.to_dict()}
            tmp_path = None
            try:
                self.cache_dir.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "w",
                    dir=self.cache_dir,
                    prefix=CACHE_FILENAME + ".",
                    suffix=".tmp",
                    delete=False,
                    encoding="utf-8",
                ) as tf:
                    tmp_path = Path(tf.name)
                    json.dump(record, tf, ensure_ascii=False)
                    tf.flush()
                    os.fsync(tf.fileno())
                os.replace(tmp_path, self.cache_file)
            except (OSError, TypeError, ValueError) as e:
                logging.warning(f"Failed to write weather cache {self.cache_file}: {e}")
                self._discard(tmp_path)
                return False

            logging.debug(f"Weather cache written: {self.cache_file}")
            return True

    def load(self, max_age: float) -> Optional[WeatherSnapshot]:
        """
        Load the cached snapshot if it is no older than ``max_age`` seconds.

        Missing, unreadable, malformed or too old records all yield None.
        """
        with self._lock:
            try:
                with self.cache_file.open("r", encoding="utf-8") as fh:
                    record = json.load(fh)
            except FileNotFoundError:
                return None
            except (OSError, ValueError) as e:
                logging.warning(f"Unreadable weather cache {self.cache_file}: {e}")
                return None

        if not isinstance(record, dict):
            logging.warning("Weather cache record is not an object")
            return None
        timestamp = record.get("timestamp")
        data = record.get("data")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)) or not data:
            logging.warning("Weather cache record missing timestamp or data")
            return None

        age = self.clock() - timestamp
        if age > max_age:
            logging.debug(f"Weather cache too old (age: {age:.0f}s > {max_age}s)")
            return None

        try:
            snapshot = WeatherSnapshot.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logging.warning(f"Malformed weather cache data: {e}")
            return None

        if not snapshot.is_valid():
            logging.warning("Weather cache record has no current conditions")
            return None

        snapshot.fetched_at = float(timestamp)
        return snapshot

    def clear(self) -> bool:
        """
        Delete the cache record and the icon directory.

        Removal errors are logged, not raised; whatever could be removed is.

        Returns:
            bool: True if anything was removed
        """
        cleared = False
        with self._lock:
            if self.cache_file.exists():
                try:
                    self.cache_file.unlink()
                except OSError as e:
                    logging.warning(f"Failed to remove weather cache {self.cache_file}: {e}")
                else:
                    logging.debug("Removed cached weather data")
                    cleared = True
            if self.icon_dir.is_dir():
                try:
                    shutil.rmtree(self.icon_dir)
                except OSError as e:
                    logging.warning(f"Failed to remove weather icons {self.icon_dir}: {e}")
                else:
                    logging.debug("Removed cached weather icons")
                    cleared = True
        return cleared

    def icon_path(self, icon_ref: Optional[str]) -> Optional[Path]:
        key = icon_cache_key(icon_ref)
        return self.icon_dir / key if key else None

    def get_or_fetch_icon(self, icon_ref: Optional[str], timeout: Optional[float] = None) -> Optional[str]:
        """
        Return the local path of an icon, downloading it on first use.

        Downloads go to a temporary file that is renamed into place only
        after the bytes are written and recognized as an image.

        Returns:
            str: Local file path, or None if the icon is unavailable
        """
        path = self.icon_path(icon_ref)
        if path is None:
            logging.debug(f"Ignoring malformed icon reference: {icon_ref!r}")
            return None
        if path.is_file():
            return str(path)
        if self.provider is None:
            return None

        try:
            content = self.provider.get_icon(icon_ref, timeout=timeout if timeout is not None else self.icon_timeout)
        except WeatherProviderError as e:
            logging.debug(f"Icon download failed: {e}")
            return None

        if not _is_image(content):
            logging.warning(f"Downloaded icon is not a valid image: {icon_ref}")
            return None

        with self._lock:
            tmp_path = None
            try:
                self.icon_dir.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "wb", dir=self.icon_dir, prefix=".", suffix=".part", delete=False
                ) as tf:
                    tmp_path = Path(tf.name)
                    tf.write(content)
                os.replace(tmp_path, path)
            except OSError as e:
                logging.warning(f"Failed to store icon {path}: {e}")
                self._discard(tmp_path)
                return None

        return str(path)

    @staticmethod
    def _discard(tmp_path: Optional[Path]) -> None:
        if tmp_path is None:
            return
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logging.debug(f"Could not remove temporary file {tmp_path}: {e}")


def _is_image(content: bytes) -> bool:
    if not content:
        return False
    try:
        with Image.open(io.BytesIO(content)) as image:
            image.verify()
    except (OSError, SyntaxError, ValueError):
        return False
    return True
