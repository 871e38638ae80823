"""
API request models using Pydantic.
"""
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from irrigation_advisor.domain.models import (
    ExternalClassifierResult,
    ImageFeatures,
    SoilReading,
    WeatherSnapshot,
)


class WeatherInput(BaseModel):
    """Weather observation supplied by the caller."""
    temperature_c: float = Field(
        description="Air temperature in °C",
        examples=[31.5]
    )
    humidity_pct: int = Field(
        ge=0, le=100,
        description="Relative humidity (%)",
        examples=[40]
    )
    condition_text: str = Field(
        default="Clear",
        description="Free-text sky condition, e.g. 'Clear', 'Light Rain'"
    )
    precipitation_last_24h_mm: Optional[float] = Field(
        default=None, ge=0,
        description="Rain in the last 24 hours (mm)"
    )
    precipitation_probability_pct: Optional[float] = Field(
        default=None, ge=0, le=100,
        description="Forecast probability of rain (%)"
    )
    location: Optional[str] = None

    def to_snapshot(self) -> WeatherSnapshot:
        return WeatherSnapshot(**self.model_dump())


class ComputeRecommendationRequest(BaseModel):
    """Recommendation inputs computed outside the service."""
    image_features: Optional[ImageFeatures] = Field(
        default=None,
        description="Colour features of the image (rule-based classification)"
    )
    classifier_result: Optional[ExternalClassifierResult] = Field(
        default=None,
        description="Output of an external soil classifier"
    )
    soil_reading: Optional[SoilReading] = Field(
        default=None,
        description="Directly reported soil condition and moisture; overrides the image inputs"
    )
    crop_type: Optional[str] = Field(
        default=None,
        description="Crop name; the default crop coefficient is used when blank"
    )
    field_area_m2: Optional[float] = Field(
        default=None, gt=0,
        description="Field area in m²"
    )
    weather: Optional[WeatherInput] = Field(
        default=None,
        description="Current weather; default weather is used when omitted"
    )

    @model_validator(mode="after")
    def require_assessment_input(self):
        inputs = (self.image_features, self.classifier_result, self.soil_reading)
        if all(value is None for value in inputs):
            raise ValueError("One of image_features, classifier_result or soil_reading is required")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "image_features": {
                    "avg_brightness": 120.0,
                    "green_pct": 12.5,
                    "brown_pct": 48.0,
                    "dark_soil_pct": 8.0,
                },
                "crop_type": "wheat",
                "field_area_m2": 250.0,
                "weather": {
                    "temperature_c": 36.0,
                    "humidity_pct": 28,
                    "condition_text": "Clear",
                },
            }
        }


class SoilReadingRequest(BaseModel):
    """Soil condition and moisture reported from the field."""
    condition: str = Field(
        min_length=1, max_length=50,
        description="Observed soil condition, e.g. 'Dry', 'Moist'",
        examples=["Dry"]
    )
    moisture_pct: float = Field(
        ge=0, le=100,
        description="Measured soil moisture (%)",
        examples=[22]
    )
    crop_type: Optional[str] = Field(
        default=None,
        description="Crop name; the default crop coefficient is used when blank"
    )
    field_area_m2: Optional[float] = Field(
        default=None, gt=0,
        description="Field area in m²"
    )
    location: Optional[str] = Field(
        default=None,
        description="City for the weather lookup; the configured default when omitted"
    )

    def to_reading(self) -> SoilReading:
        return SoilReading(condition=self.condition, moisture_pct=self.moisture_pct)
