"""
Domain service: farmer-facing and technical recommendation text.
"""
from typing import Optional

from irrigation_advisor.domain.models import (
    CalculationBreakdown,
    CropHealth,
    Urgency,
    WeatherSnapshot,
)

URGENCY_WINDOWS = {
    Urgency.CRITICAL: "immediately (within 6 hours)",
    Urgency.HIGH: "within 12 hours",
    Urgency.MEDIUM: "within 24 hours",
    Urgency.LOW: "within the next 36 hours if the soil keeps drying",
}

EXTREME_HEAT_C = 40.0
SEPARATOR = " | "


def build_farmer_message(
    crop_type: str,
    soil_label: str,
    water_per_area_l: float,
    total_water_l: Optional[float],
    urgency: Urgency,
    weather: WeatherSnapshot,
    crop_health: CropHealth = CropHealth.UNKNOWN,
) -> str:
    """
    Plain-language recommendation for the farmer.

    Always names the crop, the soil, the per-area quantity and the urgency
    window; adds the field total when the area is known, plus weather and
    crop health advice where relevant.
    """
    quantity = f"{water_per_area_l} L/m²"
    if total_water_l is not None:
        quantity += f" (about {total_water_l} L for the whole field)"

    parts = [
        f"{urgency.value} priority: for your {crop_type} on {soil_label} soil, "
        f"apply {quantity} {URGENCY_WINDOWS[urgency]}."
    ]

    if "rain" in weather.condition_text.lower():
        parts.append("Rain is reported, so the amount has been reduced; skip irrigation if it keeps raining.")
    elif weather.temperature_c > EXTREME_HEAT_C:
        parts.append("Extreme heat: irrigate early in the morning to limit evaporation.")

    if crop_health in (CropHealth.STRESSED, CropHealth.POOR):
        parts.append("The crop looks stressed: consider adding fertilizer and check for pests or disease.")

    return SEPARATOR.join(parts)


def build_technical_breakdown(breakdown: CalculationBreakdown, water_per_area_l: float) -> str:
    """
    Audit string listing every factor of the calculation.

    Factors are printed as exact float reprs so that feeding them back
    through the composition formula reproduces the final value.
    """
    return ", ".join([
        f"moisture={breakdown.moisture}%",
        f"base_water={breakdown.base_water!r} L/m²",
        f"soil_retention_factor={breakdown.soil_retention_factor!r}",
        f"crop_coefficient={breakdown.crop_coefficient!r}",
        f"evapotranspiration_factor={breakdown.evapotranspiration_factor!r}",
        f"weather_multiplier={breakdown.weather_multiplier!r}",
        f"rain_adjustment_fraction={breakdown.rain_adjustment_fraction!r}",
        f"root_depth={breakdown.root_depth_m:.2f} m",
        f"raw={breakdown.raw_water!r} L/m²",
        f"adjusted={breakdown.adjusted_water!r} L/m²",
        f"final={water_per_area_l} L/m²",
    ])
