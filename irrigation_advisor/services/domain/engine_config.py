"""
Immutable configuration for the recommendation engine.

Built once (usually from application settings) and shared read-only by
every request. The numeric defaults are empirical and uncalibrated; they
are kept as configuration so they can be reviewed and overridden.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from irrigation_advisor.config import Settings, settings as app_settings
from irrigation_advisor.domain.models import SoilType

DEFAULT_TABLE_KEY = "default"

DEFAULT_CROP_COEFFICIENTS = {
    "rice": 1.2,
    "wheat": 1.15,
    "maize": 1.2,
    "corn": 1.2,
    "cotton": 1.15,
    "sugarcane": 1.25,
    "vegetables": 1.05,
    "leafy crop": 1.0,
    DEFAULT_TABLE_KEY: 1.0,
}

DEFAULT_ROOT_DEPTHS = {
    "rice": 0.5,
    "wheat": 1.2,
    "maize": 1.0,
    "corn": 1.0,
    "cotton": 1.3,
    "sugarcane": 1.5,
    "vegetables": 0.4,
    DEFAULT_TABLE_KEY: 0.6,
}

# Peat holds water (less irrigation), laterite drains fast (more)
DEFAULT_SOIL_RETENTION = {
    SoilType.PEAT: 0.6,
    SoilType.BLACK: 0.8,
    SoilType.YELLOW: 1.0,
    SoilType.CINDER: 1.1,
    SoilType.LATERITE: 1.2,
    SoilType.OTHER: 1.0,
}

# Moisture estimate (%) for each label of the external soil classifier
DEFAULT_SOIL_MOISTURE = {
    SoilType.BLACK: 60,
    SoilType.CINDER: 40,
    SoilType.LATERITE: 30,
    SoilType.PEAT: 70,
    SoilType.YELLOW: 50,
    SoilType.OTHER: 50,
}


def _freeze(table: Mapping) -> Mapping:
    return MappingProxyType(dict(table))


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the irrigation recommendation engine."""

    min_liters_per_m2: float = 2.0
    """Lower bound of every recommendation (L/m²)"""

    max_liters_per_m2: float = 20.0
    """Upper bound of every recommendation (L/m²)"""

    rain_reduction_threshold_mm: float = 5.0
    """24h rain at which the demand is reduced by at least half"""

    strong_rain_reduction_mm: float = 10.0
    """24h rain at which irrigation is almost entirely skipped"""

    rain_probability_reduction_factor: float = 0.8
    """Weight applied to forecast rain probability"""

    external_confidence_threshold: float = 60.0
    """Model results below this confidence are replaced by the rule-based path"""

    crop_coefficient_table: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_CROP_COEFFICIENTS
    )
    root_depth_table: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_ROOT_DEPTHS
    )
    soil_retention_table: Mapping[SoilType, float] = field(
        default_factory=lambda: DEFAULT_SOIL_RETENTION
    )
    soil_moisture_table: Mapping[SoilType, int] = field(
        default_factory=lambda: DEFAULT_SOIL_MOISTURE
    )

    def __post_init__(self):
        if self.min_liters_per_m2 < 0 or self.min_liters_per_m2 > self.max_liters_per_m2:
            raise ValueError(
                f"Invalid water bounds: [{self.min_liters_per_m2}, {self.max_liters_per_m2}]"
            )
        if self.rain_reduction_threshold_mm > self.strong_rain_reduction_mm:
            raise ValueError("rain_reduction_threshold_mm must not exceed strong_rain_reduction_mm")

        for name in ("crop_coefficient_table", "root_depth_table"):
            table = {key.lower(): value for key, value in getattr(self, name).items()}
            table.setdefault(DEFAULT_TABLE_KEY, 1.0 if name == "crop_coefficient_table" else 0.6)
            object.__setattr__(self, name, _freeze(table))

        retention = dict(DEFAULT_SOIL_RETENTION)
        retention.update(self.soil_retention_table)
        object.__setattr__(self, "soil_retention_table", _freeze(retention))

        moisture = dict(DEFAULT_SOIL_MOISTURE)
        moisture.update(self.soil_moisture_table)
        object.__setattr__(self, "soil_moisture_table", _freeze(moisture))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EngineConfig":
        """
        Build the engine configuration from application settings.

        Args:
            settings: Settings instance; the global one when omitted

        Returns:
            EngineConfig instance
        """
        settings = settings or app_settings

        return cls(
            min_liters_per_m2=settings.min_liters_per_m2,
            max_liters_per_m2=settings.max_liters_per_m2,
            rain_reduction_threshold_mm=settings.rain_reduction_threshold_mm,
            strong_rain_reduction_mm=settings.strong_rain_reduction_mm,
            rain_probability_reduction_factor=settings.rain_probability_reduction_factor,
            external_confidence_threshold=settings.external_confidence_threshold,
            crop_coefficient_table=settings.crop_coefficient_table,
            root_depth_table=settings.root_depth_table,
        )
