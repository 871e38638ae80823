"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Weather API Configuration
    weather_api_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        description="Base URL for the weather API"
    )
    weather_api_key: str = Field(
        default="",
        description="API key for the weather provider"
    )
    weather_units: str = Field(
        default="metric",
        description="Unit system requested from the weather provider"
    )
    weather_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single weather request"
    )
    default_location: str = Field(
        default="Lahore",
        description="Location used when a request does not name one"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=5,
        description="Maximum wait time in seconds between retries"
    )

    # Water Demand Parameters
    min_liters_per_m2: float = Field(
        default=2.0,
        description="Lower bound of any water recommendation (L/m²)"
    )
    max_liters_per_m2: float = Field(
        default=20.0,
        description="Upper bound of any water recommendation (L/m²)"
    )
    rain_reduction_threshold_mm: float = Field(
        default=5.0,
        description="Rain in the last 24h that halves the recommendation"
    )
    strong_rain_reduction_mm: float = Field(
        default=10.0,
        description="Rain in the last 24h that nearly skips irrigation"
    )
    rain_probability_reduction_factor: float = Field(
        default=0.8,
        description="Weight applied to forecast rain probability"
    )
    external_confidence_threshold: float = Field(
        default=60.0,
        description="Minimum model confidence before falling back to rules"
    )
    crop_coefficient_table: dict[str, float] = Field(
        default={
            "rice": 1.2,
            "wheat": 1.15,
            "maize": 1.2,
            "corn": 1.2,
            "cotton": 1.15,
            "sugarcane": 1.25,
            "vegetables": 1.05,
            "leafy crop": 1.0,
            "default": 1.0,
        },
        description="Crop coefficient (Kc) per crop type, must include 'default'"
    )
    root_depth_table: dict[str, float] = Field(
        default={
            "rice": 0.5,
            "wheat": 1.2,
            "maize": 1.0,
            "corn": 1.0,
            "cotton": 1.3,
            "sugarcane": 1.5,
            "vegetables": 0.4,
            "default": 0.6,
        },
        description="Effective root depth in meters per crop type"
    )

    # Image Processing
    image_max_dimension: int = Field(
        default=512,
        description="Longest image side after resizing, in pixels"
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted upload size"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Irrigation Advisor",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
