"""
Infrastructure layer: weather API client with retry logic.
"""
from typing import Any, Dict, List, Optional
import logging
import httpx
from pydantic import BaseModel, Field, ValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from irrigation_advisor.config import settings
from irrigation_advisor.domain.exceptions import WeatherAPIError
from irrigation_advisor.domain.models import WeatherSnapshot
from irrigation_advisor.infrastructure.api_constants import APIConstants, WeatherAPIEndpoints

logger = logging.getLogger(__name__)


# Pydantic models for provider responses
class OpenWeatherMain(BaseModel):
    """Temperature and humidity block."""
    temp: float = Field(description="Air temperature in the requested units")
    humidity: int = Field(description="Relative humidity (%)")


class OpenWeatherCondition(BaseModel):
    """One entry of the 'weather' list."""
    main: Optional[str] = None
    description: Optional[str] = None


class OpenWeatherRain(BaseModel):
    """Recent rain volumes (mm)."""
    one_hour: Optional[float] = Field(default=None, alias="1h")
    three_hour: Optional[float] = Field(default=None, alias="3h")

    class Config:
        populate_by_name = True


class OpenWeatherResponse(BaseModel):
    """Response from the current weather endpoint."""
    name: Optional[str] = None
    main: OpenWeatherMain
    weather: List[OpenWeatherCondition] = Field(default_factory=list)
    rain: Optional[OpenWeatherRain] = None


class WeatherClient:
    """
    Client for an OpenWeatherMap-compatible current weather API.
    Implements retry logic with exponential backoff.
    """

    def __init__(self):
        """Initialize the API client with configuration."""
        self.base_url = settings.weather_api_base_url
        self.api_key = settings.weather_api_key
        self.units = settings.weather_units
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"accept": APIConstants.CONTENT_TYPE_JSON},
            timeout=settings.weather_timeout_seconds,
        )

    async def __aenter__(self) -> "WeatherClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Response data as dictionary

        Raises:
            WeatherAPIError: On client errors (4xx) or a non-JSON body, which are not retried
            httpx.HTTPStatusError: On server errors once retries are exhausted
            httpx.RequestError: On transport errors once retries are exhausted
        """
        try:
            response = await self.client.request(method, endpoint, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                raise
            # Don't retry on client errors (4xx)
            raise WeatherAPIError(
                f"Weather request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise WeatherAPIError(
                f"Weather provider returned a non-JSON body ({response.headers.get('content-type', 'unknown')})"
            ) from e

    async def get_current_weather(self, location: str) -> WeatherSnapshot:
        """
        Fetch the current weather for a location.

        Args:
            location: City name understood by the provider

        Returns:
            WeatherSnapshot instance

        Raises:
            WeatherAPIError: If the request fails or the payload is unusable
        """
        params = WeatherAPIEndpoints.current_weather_params(location, self.api_key, self.units)
        try:
            data = await self._make_request("GET", WeatherAPIEndpoints.CURRENT_WEATHER, params=params)
        except httpx.HTTPStatusError as e:
            raise WeatherAPIError(
                f"Weather provider error after retries: {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise WeatherAPIError(f"Weather request error: {str(e)}") from e

        return self.parse_weather(data, location)

    def parse_weather(self, data: Any, location: Optional[str] = None) -> WeatherSnapshot:
        """
        Convert a provider payload into a WeatherSnapshot.

        Recent rain ("rain.3h", else "rain.1h") is a lower bound for the
        last 24 hours and is used as such.

        Args:
            data: Decoded JSON payload
            location: Requested location, used when the payload has no name

        Returns:
            WeatherSnapshot instance

        Raises:
            WeatherAPIError: If the payload does not match the expected shape
        """
        try:
            response = OpenWeatherResponse.model_validate(data)
        except ValidationError as e:
            raise WeatherAPIError(
                f"Unexpected weather payload: {e.error_count()} validation error(s)"
            ) from e

        condition = "Unknown"
        if response.weather:
            first = response.weather[0]
            condition = first.description or first.main or condition

        recent_rain = None
        if response.rain is not None:
            recent_rain = response.rain.three_hour
            if recent_rain is None:
                recent_rain = response.rain.one_hour

        return WeatherSnapshot(
            temperature_c=response.main.temp,
            humidity_pct=response.main.humidity,
            condition_text=condition.title(),
            precipitation_last_24h_mm=recent_rain,
            location=response.name or location,
        )


# Singleton instance
_weather_client: Optional[WeatherClient] = None


def get_weather_client() -> WeatherClient:
    """
    Get or create the singleton weather client instance.

    Returns:
        WeatherClient instance
    """
    global _weather_client
    if _weather_client is None:
        _weather_client = WeatherClient()
    return _weather_client
