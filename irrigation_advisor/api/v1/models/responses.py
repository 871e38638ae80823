"""
API response models using Pydantic.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from irrigation_advisor.domain.models import (
    CalculationBreakdown,
    IrrigationPlan,
    Urgency,
)


class RecommendationResponse(BaseModel):
    """Response model for recommendation endpoints."""

    # Image analysis
    soil_condition: str = Field(description="Soil label (visual condition or soil type)")
    soil_type: str
    estimated_moisture: int = Field(description="Estimated soil moisture (%)")
    crop_health: str
    image_confidence: float = Field(description="Classification confidence (%)")
    classification_strategy: str
    fallback_used: bool

    # Weather
    temperature_c: float
    humidity_pct: int
    weather_condition: str
    location: Optional[str] = None

    # Calculation
    crop_type: str
    water_per_square_meter: float = Field(description="Recommended water (L/m²)")
    field_area_m2: Optional[float] = None
    total_water_l: Optional[float] = Field(
        default=None,
        description="Total water for the field, null when no area was given"
    )

    # Recommendation
    urgency: Urgency
    next_check_at: datetime
    farmer_message: str
    technical_breakdown: str
    breakdown: CalculationBreakdown
    calculated_at: datetime

    @classmethod
    def from_plan(cls, plan: IrrigationPlan) -> "RecommendationResponse":
        classification = plan.classification
        return cls(
            soil_condition=classification.soil.label,
            soil_type=classification.soil.soil_type.value,
            estimated_moisture=classification.soil.moisture,
            crop_health=classification.crop.health.value,
            image_confidence=classification.confidence,
            classification_strategy=classification.strategy.value,
            fallback_used=classification.fallback_used,
            temperature_c=plan.weather.temperature_c,
            humidity_pct=plan.weather.humidity_pct,
            weather_condition=plan.weather.condition_text,
            location=plan.weather.location,
            crop_type=plan.crop_type,
            water_per_square_meter=plan.water_per_area_l,
            field_area_m2=plan.field_area_m2,
            total_water_l=plan.total_water_l,
            urgency=plan.urgency,
            next_check_at=plan.next_check_at,
            farmer_message=plan.farmer_message,
            technical_breakdown=plan.technical_breakdown,
            breakdown=plan.breakdown,
            calculated_at=plan.calculated_at,
        )


class WeatherResponse(BaseModel):
    """Response model for the weather endpoint."""
    location: Optional[str] = None
    temperature_c: float
    humidity_pct: int
    condition_text: str
    precipitation_last_24h_mm: Optional[float] = None
    precipitation_probability_pct: Optional[float] = None

    class Config:
        json_schema_extra = {
            "example": {
                "location": "Lahore",
                "temperature_c": 34.2,
                "humidity_pct": 38,
                "condition_text": "Clear Sky",
                "precipitation_last_24h_mm": None,
                "precipitation_probability_pct": None,
            }
        }
