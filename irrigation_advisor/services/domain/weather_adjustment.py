"""
Domain service: weather and agronomic adjustment factors.

Pure functions that turn soil type, crop type and a weather snapshot into
dimensionless multipliers for the water demand calculation.
"""
from typing import Mapping, Optional, Union
import logging

from irrigation_advisor.domain.models import SoilType, WeatherSnapshot
from irrigation_advisor.services.domain.engine_config import (
    DEFAULT_TABLE_KEY,
    EngineConfig,
)

logger = logging.getLogger(__name__)

# Evapotranspiration linear model around 20 °C / 30 % humidity
ET_REFERENCE_TEMPERATURE_C = 20.0
ET_REFERENCE_HUMIDITY_PCT = 30.0
ET_TEMPERATURE_SLOPE = 0.05
ET_HUMIDITY_SLOPE = 0.01
ET_MIN = 0.5
ET_MAX = 2.0

HOT_TEMPERATURE_C = 35.0
HOT_MULTIPLIER = 1.15
DRY_AIR_HUMIDITY_PCT = 30
DRY_AIR_MULTIPLIER = 1.1
HEAVY_RAIN_TERMS = ("heavy rain", "downpour")
HEAVY_RAIN_MULTIPLIER = 0.25
RAIN_MULTIPLIER = 0.6

MODERATE_RAIN_FRACTION = 0.5
STRONG_RAIN_FRACTION = 0.9
RAIN_TEXT_FRACTION = 0.35
MAX_RAIN_FRACTION = 0.9


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def lookup_crop_table(table: Mapping[str, float], crop_type: Optional[str]) -> float:
    """
    Look up a crop in a table by exact key, then by a table key contained
    in the crop name ("basmati rice" -> "rice"), then 'default'.

    Args:
        table: Crop keyed table with lower-case keys
        crop_type: Free-text crop name

    Returns:
        Table value for the crop
    """
    key = (crop_type or "").strip().lower()
    if not key:
        return table[DEFAULT_TABLE_KEY]
    if key in table:
        return table[key]

    for name, value in table.items():
        if name != DEFAULT_TABLE_KEY and name in key:
            return value

    return table[DEFAULT_TABLE_KEY]


def soil_retention_factor(
    soil_type: Union[SoilType, str, None],
    config: Optional[EngineConfig] = None,
) -> float:
    """
    Multiplier for how well the soil retains water.

    Water-holding soils (< 1.0) reduce the need, fast-draining ones (> 1.0)
    increase it. Free-text labels are substring matched.
    """
    config = config or EngineConfig()
    if not isinstance(soil_type, SoilType):
        soil_type = SoilType.from_label(soil_type)
    return config.soil_retention_table[soil_type]


def crop_coefficient(crop_type: Optional[str], config: Optional[EngineConfig] = None) -> float:
    """Crop coefficient (Kc) for a crop type."""
    config = config or EngineConfig()
    return lookup_crop_table(config.crop_coefficient_table, crop_type)


def root_depth(crop_type: Optional[str], config: Optional[EngineConfig] = None) -> float:
    """Effective root depth in meters for a crop type."""
    config = config or EngineConfig()
    return lookup_crop_table(config.root_depth_table, crop_type)


def evapotranspiration_factor(temperature_c: float, humidity_pct: float) -> float:
    """
    Approximate atmospheric water demand relative to a mild day.

    1 + 0.05 * (T - 20) + 0.01 * (30 - H), clamped to [0.5, 2.0].
    """
    factor = (
        1.0
        + ET_TEMPERATURE_SLOPE * (temperature_c - ET_REFERENCE_TEMPERATURE_C)
        + ET_HUMIDITY_SLOPE * (ET_REFERENCE_HUMIDITY_PCT - humidity_pct)
    )
    return clamp(factor, ET_MIN, ET_MAX)


def weather_multiplier(snapshot: WeatherSnapshot) -> float:
    """
    Multiplier from extreme heat, dry air and rain in the condition text.
    """
    multiplier = 1.0
    if snapshot.temperature_c > HOT_TEMPERATURE_C:
        multiplier *= HOT_MULTIPLIER
    if snapshot.humidity_pct < DRY_AIR_HUMIDITY_PCT:
        multiplier *= DRY_AIR_MULTIPLIER

    condition = snapshot.condition_text.lower()
    if any(term in condition for term in HEAVY_RAIN_TERMS):
        multiplier *= HEAVY_RAIN_MULTIPLIER
    elif "rain" in condition:
        multiplier *= RAIN_MULTIPLIER

    return multiplier


def rain_adjustment_fraction(
    snapshot: WeatherSnapshot,
    config: Optional[EngineConfig] = None,
) -> float:
    """
    Fraction by which demand is reduced for recent or forecast rain.

    Args:
        snapshot: Weather snapshot
        config: Engine configuration with the rain thresholds

    Returns:
        Fraction in [0, 0.9]
    """
    config = config or EngineConfig()
    fraction = 0.0
    rain_mm = snapshot.precipitation_last_24h_mm
    probability = snapshot.precipitation_probability_pct

    if rain_mm is not None:
        if rain_mm >= config.strong_rain_reduction_mm:
            return STRONG_RAIN_FRACTION
        if rain_mm >= config.rain_reduction_threshold_mm:
            fraction = max(fraction, MODERATE_RAIN_FRACTION)

    if probability is not None:
        fraction = max(
            fraction,
            (probability / 100.0) * config.rain_probability_reduction_factor,
        )

    if rain_mm is None and probability is None and "rain" in snapshot.condition_text.lower():
        fraction = max(fraction, RAIN_TEXT_FRACTION)

    return clamp(fraction, 0.0, MAX_RAIN_FRACTION)
