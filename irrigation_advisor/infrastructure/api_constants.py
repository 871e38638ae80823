"""
Weather API endpoint constants and configuration.

Centralizing these values makes it easy to swap providers or API versions.
"""


class WeatherAPIEndpoints:
    """OpenWeatherMap-compatible endpoint paths."""

    CURRENT_WEATHER = "/weather"

    @classmethod
    def current_weather_params(cls, location: str, api_key: str, units: str) -> dict[str, str]:
        """
        Query parameters for the current weather endpoint.

        Args:
            location: City name, optionally with country code ("Lahore,PK")
            api_key: Provider API key
            units: Unit system ("metric" gives °C)

        Returns:
            Query parameter mapping
        """
        return {"q": location, "appid": api_key, "units": units}


class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"

    # Accepted uploads
    ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png")
