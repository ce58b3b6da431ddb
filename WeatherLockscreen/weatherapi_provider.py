"""WeatherAPI.com forecast API provider implementation."""
import logging
import requests
from typing import Any, Dict, List, Optional
from weather_provider import WeatherProviderBase, WeatherProviderError


class WeatherAPIProvider(WeatherProviderBase):
    """
    Weather provider using the WeatherAPI.com forecast endpoint.

    Docs: https://www.weatherapi.com/docs/
    The free plan covers forecast.json (up to 3 days) and search.json.
    """

    BASE_URL = "https://api.weatherapi.com/v1"

    def __init__(self, timeout: float = 10, session: Optional[requests.Session] = None):
        """
        Initialize WeatherAPI provider.

        Args:
            timeout: Default HTTP request timeout in seconds
            session: Optional requests session (connection reuse, testing)
        """
        self.timeout = timeout
        self.session = session

    def _get(self, url: str, params: Optional[Dict[str, Any]], timeout: Optional[float]) -> requests.Response:
        getter = self.session.get if self.session is not None else requests.get
        return getter(url, params=params, timeout=timeout if timeout is not None else self.timeout)

    def get_forecast(
        self,
        location: str,
        api_key: str,
        language: str = "en",
        days: int = 2,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Fetch forecast from WeatherAPI.com.

        Returns:
            dict: Raw forecast document

        Raises:
            WeatherProviderError: If the API request fails
        """
        url = f"{self.BASE_URL}/forecast.json"
        params = {
            "key": api_key,
            "q": location,
            "days": days,
            "aqi": "no",
            "alerts": "no",
            "lang": language,
        }

        try:
            logging.info(f"Making WeatherAPI request: {url}")
            logging.debug(
                f"Request parameters: q={location}, days={days}, lang={language}, "
                f"key={_mask_key(api_key)}"
            )

            response = self._get(url, params, timeout)

            logging.info(f"API response status: {response.status_code}")

            if response.status_code != 200:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except ValueError as e:
            logging.error(f"Failed to parse API response: {e}")
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        if not isinstance(data, dict):
            raise WeatherProviderError("Response is not a JSON object")
        logging.debug(f"API response data keys: {list(data.keys())}")

        if "error" in data:
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            logging.error(f"WeatherAPI returned an error: {error}")
            raise WeatherProviderError(f"WeatherAPI error: {message}")

        if not data.get("current"):
            logging.error("Response missing 'current' block")
            raise WeatherProviderError("Response missing 'current' block")

        return data

    def search_locations(
        self, query: str, api_key: str, timeout: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """
        Search locations for the location picker.

        Returns:
            list: Dicts with name, region, country, lat and lon

        Raises:
            WeatherProviderError: If the API request fails
        """
        url = f"{self.BASE_URL}/search.json"
        try:
            logging.info(f"Searching locations for '{query}'")
            response = self._get(url, {"key": api_key, "q": query}, timeout)
            if response.status_code != 200:
                self._handle_error_response(response)
            results = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during location search: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except ValueError as e:
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        if not isinstance(results, list):
            raise WeatherProviderError("Unexpected location search response")

        return [
            {
                "name": item.get("name"),
                "region": item.get("region"),
                "country": item.get("country"),
                "lat": item.get("lat"),
                "lon": item.get("lon"),
            }
            for item in results
            if isinstance(item, dict)
        ]

    def get_icon(self, url: str, timeout: Optional[float] = None) -> bytes:
        """Download icon bytes. Protocol-relative URLs are fetched over https."""
        if url.startswith("//"):
            url = "https:" + url
        try:
            logging.debug(f"Downloading icon from: {url}")
            response = self._get(url, None, timeout)
        except requests.exceptions.RequestException as e:
            raise WeatherProviderError(f"Icon download failed: {str(e)}")
        if response.status_code != 200:
            raise WeatherProviderError(
                f"Icon download failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.content

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from a WeatherAPI error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        logging.error(f"WeatherAPI error response: {error_data}")
        error = error_data.get("error", {}) if isinstance(error_data, dict) else {}
        if not isinstance(error, dict):
            error = {"message": str(error)}
        code = error.get("code", response.status_code)
        message = error.get("message", "Unknown error")
        raise WeatherProviderError(
            f"WeatherAPI error {code} (HTTP {response.status_code}): {message}",
            status_code=response.status_code,
        )


def _mask_key(api_key: Optional[str]) -> str:
    if not api_key:
        return "none"
    return api_key[:8] + "..."
