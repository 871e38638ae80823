"""
Domain models for the irrigation recommendation pipeline.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, image codecs, model runtimes).
All of them are immutable once built and live for a single request.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def _clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


class SoilCondition(str, Enum):
    """Visual soil wetness class produced by the rule-based classifier."""
    DRY = "Dry"
    MOIST = "Moist"
    WET = "Wet"
    MODERATE = "Moderate"
    UNKNOWN = "Unknown"


class SoilType(str, Enum):
    """Soil categories known to the external classifier, plus a catch-all."""
    BLACK = "black"
    CINDER = "cinder"
    LATERITE = "laterite"
    PEAT = "peat"
    YELLOW = "yellow"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "SoilType":
        """
        Match a free-text soil label against the known categories.

        Matching is a case-insensitive substring test, so "Laterite Soil"
        and "laterite" both map to LATERITE. Anything unmatched is OTHER.
        """
        if not label:
            return cls.OTHER
        text = label.lower()
        for soil_type in cls:
            if soil_type is not cls.OTHER and soil_type.value in text:
                return soil_type
        return cls.OTHER


class CropHealth(str, Enum):
    """Crop vigour class derived from vegetation coverage."""
    HEALTHY = "Healthy"
    MODERATE = "Moderate"
    STRESSED = "Stressed"
    POOR = "Poor"
    NO_CROP_DETECTED = "No Crop Detected"
    UNKNOWN = "Unknown"


class Urgency(str, Enum):
    """Irrigation urgency, ordered from Low to Critical."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Urgency):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Urgency):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Urgency):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Urgency):
            return NotImplemented
        return self.rank >= other.rank


_URGENCY_RANK = {
    Urgency.LOW: 0,
    Urgency.MEDIUM: 1,
    Urgency.HIGH: 2,
    Urgency.CRITICAL: 3,
}


class ClassificationStrategy(str, Enum):
    RULE_BASED = "rule_based"
    EXTERNAL_MODEL = "external_model"
    MANUAL_READING = "manual_reading"


class ImageFeatures(BaseModel):
    """Scalar colour features extracted from one image."""
    avg_brightness: float = Field(ge=0, le=255, description="Mean HSV value channel")
    green_pct: float = Field(ge=0, le=100, description="Vegetation pixel share (%)")
    brown_pct: float = Field(ge=0, le=100, description="Bare-soil pixel share (%)")
    dark_soil_pct: float = Field(ge=0, le=100, description="Dark pixel share (%)")

    class Config:
        frozen = True


class ExternalClassifierResult(BaseModel):
    """Raw output of the external soil classifier."""
    label: str
    confidence_pct: float = Field(description="Model confidence, 0-100")

    class Config:
        frozen = True

    @field_validator("confidence_pct", mode="before")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return _clamp_percentage(value)


class SoilReading(BaseModel):
    """Soil state reported directly by the farmer or a moisture meter."""
    condition: str = Field(default="Unknown", max_length=50, description="Observed condition, e.g. 'Dry'")
    moisture_pct: float = Field(description="Measured moisture (%), clamped to 0-100")

    class Config:
        frozen = True

    @field_validator("moisture_pct", mode="before")
    @classmethod
    def clamp_moisture(cls, value: float) -> float:
        return _clamp_percentage(value)


class SoilAssessment(BaseModel):
    """Soil state estimate. Moisture is always clamped to [0, 100]."""
    condition: SoilCondition = SoilCondition.UNKNOWN
    soil_type: SoilType = SoilType.OTHER
    label: str = Field(description="Human-readable soil label")
    moisture: int = Field(description="Estimated moisture (%)")

    class Config:
        frozen = True

    @field_validator("moisture", mode="before")
    @classmethod
    def clamp_moisture(cls, value: float) -> int:
        return int(_clamp_percentage(value))


class CropAssessment(BaseModel):
    """Crop health estimate."""
    health: CropHealth = CropHealth.UNKNOWN
    confidence: float = Field(default=0.0, description="Confidence (%)")

    class Config:
        frozen = True

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return _clamp_percentage(value)


class Classification(BaseModel):
    """Combined soil and crop classification from one strategy."""
    soil: SoilAssessment
    crop: CropAssessment
    confidence: float = Field(description="Overall confidence (%)")
    strategy: ClassificationStrategy
    fallback_used: bool = Field(
        default=False,
        description="True when a low-confidence model result was replaced by rules"
    )

    class Config:
        frozen = True

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return _clamp_percentage(value)


class WeatherSnapshot(BaseModel):
    """Current weather, with explicit optional precipitation signals."""
    temperature_c: float
    humidity_pct: int
    condition_text: str
    precipitation_last_24h_mm: Optional[float] = None
    precipitation_probability_pct: Optional[float] = None
    location: Optional[str] = None

    class Config:
        frozen = True


DEFAULT_WEATHER = WeatherSnapshot(
    temperature_c=28.0,
    humidity_pct=55,
    condition_text="Clear",
    location="default",
)


class CalculationBreakdown(BaseModel):
    """Every intermediate factor of one water demand computation."""
    moisture: int
    base_water: float
    soil_retention_factor: float
    crop_coefficient: float
    evapotranspiration_factor: float
    weather_multiplier: float
    rain_adjustment_fraction: float
    raw_water: float
    adjusted_water: float
    root_depth_m: float

    class Config:
        frozen = True


class IrrigationPlan(BaseModel):
    """Final irrigation recommendation."""
    crop_type: str
    classification: Classification
    weather: WeatherSnapshot
    water_per_area_l: float = Field(description="Recommended water (L/m²)")
    field_area_m2: Optional[float] = None
    total_water_l: Optional[float] = Field(
        default=None,
        description="Total water for the field; None when the area is unknown"
    )
    urgency: Urgency
    next_check_at: datetime
    farmer_message: str
    technical_breakdown: str
    breakdown: CalculationBreakdown
    calculated_at: datetime

    class Config:
        frozen = True
