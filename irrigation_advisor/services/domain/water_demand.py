"""
Domain service: water demand calculation.

Composes soil moisture with the adjustment factors into a bounded
liters-per-m² recommendation, and optionally a total volume for a field.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from irrigation_advisor.domain.models import (
    CalculationBreakdown,
    SoilType,
    WeatherSnapshot,
)
from irrigation_advisor.services.domain.engine_config import EngineConfig
from irrigation_advisor.services.domain.weather_adjustment import (
    clamp,
    crop_coefficient,
    evapotranspiration_factor,
    rain_adjustment_fraction,
    root_depth,
    soil_retention_factor,
    weather_multiplier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaterDemand:
    """Result of one water demand calculation."""
    water_per_area_l: float
    total_water_l: Optional[float]
    breakdown: CalculationBreakdown


def base_water(moisture: float, config: Optional[EngineConfig] = None) -> float:
    """
    Baseline demand, falling linearly from the upper bound (bone dry) to the
    lower bound (saturated).

    Args:
        moisture: Soil moisture (%)
        config: Engine configuration with the water bounds

    Returns:
        Baseline liters per m², within the configured bounds
    """
    config = config or EngineConfig()
    low, high = config.min_liters_per_m2, config.max_liters_per_m2
    water = low + (high - low) * (1.0 - moisture / 100.0)
    return clamp(water, low, high)


def compose_water_demand(
    breakdown: CalculationBreakdown,
    config: Optional[EngineConfig] = None,
) -> float:
    """
    Apply the composition formula to a set of factors.

    Used both to produce the recommendation and to audit a breakdown
    after the fact.

    Returns:
        Liters per m², clamped to bounds and rounded to 0.1
    """
    config = config or EngineConfig()
    raw = (
        breakdown.base_water
        * breakdown.soil_retention_factor
        * breakdown.crop_coefficient
        * breakdown.evapotranspiration_factor
        * breakdown.weather_multiplier
    )
    adjusted = raw * (1.0 - breakdown.rain_adjustment_fraction)
    return round(clamp(adjusted, config.min_liters_per_m2, config.max_liters_per_m2), 1)


def total_water(water_per_area_l: float, field_area_m2: Optional[float]) -> Optional[float]:
    """Total liters for a field, or None when the area is unknown or not positive."""
    if field_area_m2 is None or field_area_m2 <= 0:
        return None
    return round(water_per_area_l * field_area_m2, 1)


def calculate_water_demand(
    moisture: int,
    soil_type: SoilType,
    crop_type: Optional[str],
    weather: WeatherSnapshot,
    field_area_m2: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> WaterDemand:
    """
    Compute the water recommendation for one assessment.

    Args:
        moisture: Soil moisture estimate (%)
        soil_type: Soil category driving the retention factor
        crop_type: Crop name for the crop coefficient
        weather: Weather snapshot
        field_area_m2: Optional field area for a total volume
        config: Engine configuration

    Returns:
        WaterDemand with per-area and total figures and every factor used
    """
    config = config or EngineConfig()

    base = base_water(moisture, config)
    retention = soil_retention_factor(soil_type, config)
    kc = crop_coefficient(crop_type, config)
    et = evapotranspiration_factor(weather.temperature_c, weather.humidity_pct)
    multiplier = weather_multiplier(weather)
    rain_fraction = rain_adjustment_fraction(weather, config)

    raw = base * retention * kc * et * multiplier
    adjusted = raw * (1.0 - rain_fraction)

    breakdown = CalculationBreakdown(
        moisture=moisture,
        base_water=base,
        soil_retention_factor=retention,
        crop_coefficient=kc,
        evapotranspiration_factor=et,
        weather_multiplier=multiplier,
        rain_adjustment_fraction=rain_fraction,
        raw_water=raw,
        adjusted_water=adjusted,
        root_depth_m=root_depth(crop_type, config),
    )
    water_per_area = compose_water_demand(breakdown, config)

    logger.info(
        f"Water demand: base={base:.2f} retention={retention} kc={kc} et={et:.2f} "
        f"weather={multiplier:.3f} rain={rain_fraction:.2f} -> {water_per_area} L/m²"
    )

    return WaterDemand(
        water_per_area_l=water_per_area,
        total_water_l=total_water(water_per_area, field_area_m2),
        breakdown=breakdown,
    )
