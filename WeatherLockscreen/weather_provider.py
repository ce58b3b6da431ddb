"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class WeatherProviderBase(ABC):
    """Abstract base class for remote weather data providers."""

    @abstractmethod
    def get_forecast(
        self,
        location: str,
        api_key: str,
        language: str = "en",
        days: int = 2,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Fetch the raw forecast document for a location.

        Returns:
            dict: Provider JSON containing at least a "current" section

        Raises:
            WeatherProviderError: On transport failure, non-200 status,
                unparseable body, an "error" field or a missing "current"
        """
        pass

    @abstractmethod
    def get_icon(self, url: str, timeout: Optional[float] = None) -> bytes:
        """
        Download an icon image.

        Raises:
            WeatherProviderError: If the download fails
        """
        pass

    @abstractmethod
    def search_locations(
        self, query: str, api_key: str, timeout: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """
        Look up locations matching a free-text query.

        Returns:
            list: Dicts with name, region, country, lat and lon

        Raises:
            WeatherProviderError: If the search fails
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
