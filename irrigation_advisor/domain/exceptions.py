"""
Domain exceptions.
"""


class AdvisorError(Exception):
    """Base exception for the irrigation advisor."""
    pass


class InvalidFeatureData(AdvisorError, ValueError):
    """Pixel data is empty or malformed; no assessment can be derived."""
    pass


class WeatherAPIError(AdvisorError):
    """Weather provider request failed."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
