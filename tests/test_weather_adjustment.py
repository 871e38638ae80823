"""
Unit tests for weather and agronomic adjustment factors.

Tests cover:
- Soil retention lookup
- Crop coefficient and root depth lookup
- Evapotranspiration factor
- Weather multiplier
- Rain adjustment fraction
- Engine configuration
"""
import dataclasses
import itertools
import pytest

from irrigation_advisor.config import Settings
from irrigation_advisor.domain.models import SoilType, WeatherSnapshot
from irrigation_advisor.services.domain.engine_config import EngineConfig
from irrigation_advisor.services.domain.weather_adjustment import (
    crop_coefficient,
    evapotranspiration_factor,
    rain_adjustment_fraction,
    root_depth,
    soil_retention_factor,
    weather_multiplier,
)


def snapshot(
    temperature=25.0,
    humidity=50,
    condition="Clear",
    rain_mm=None,
    probability=None,
) -> WeatherSnapshot:
    return WeatherSnapshot(
        temperature_c=temperature,
        humidity_pct=humidity,
        condition_text=condition,
        precipitation_last_24h_mm=rain_mm,
        precipitation_probability_pct=probability,
    )


# ============================================================
# Soil Retention Tests
# ============================================================

class TestSoilRetention:
    """Tests for soil retention multipliers."""

    @pytest.mark.parametrize("label,factor", [
        ("Peat Soil", 0.6),
        ("peat", 0.6),
        ("Black Soil", 0.8),
        ("Yellow Soil", 1.0),
        ("Cinder Soil", 1.1),
        ("LATERITE SOIL", 1.2),
        ("Dry", 1.0),
        ("", 1.0),
        (None, 1.0),
    ])
    def test_label_matching(self, label, factor):
        assert soil_retention_factor(label) == factor

    def test_enum_input(self):
        assert soil_retention_factor(SoilType.LATERITE) == 1.2

    def test_from_label(self):
        assert SoilType.from_label("Red Laterite Soil") == SoilType.LATERITE
        assert SoilType.from_label("Sandy Loam") == SoilType.OTHER


# ============================================================
# Crop Lookup Tests
# ============================================================

class TestCropLookup:
    """Tests for crop coefficient and root depth lookup."""

    def test_exact_match(self):
        assert crop_coefficient("rice") == 1.2
        assert crop_coefficient("sugarcane") == 1.25

    def test_case_insensitive(self):
        assert crop_coefficient("Wheat") == 1.15

    def test_substring_match(self):
        assert crop_coefficient("Basmati Rice") == 1.2
        assert crop_coefficient("sweet corn") == 1.2

    def test_default(self):
        assert crop_coefficient("banana") == 1.0
        assert crop_coefficient("") == 1.0
        assert crop_coefficient(None) == 1.0
        assert crop_coefficient("   ") == 1.0

    def test_injected_table(self):
        config = EngineConfig(crop_coefficient_table={"Tomato": 1.1, "default": 0.9})

        assert crop_coefficient("tomato", config) == 1.1
        assert crop_coefficient("rice", config) == 0.9

    def test_root_depth(self):
        assert root_depth("sugarcane") == 1.5
        assert root_depth("unknown crop") == 0.6


# ============================================================
# Evapotranspiration Tests
# ============================================================

class TestEvapotranspiration:
    """Tests for the linear evapotranspiration factor."""

    def test_reference_conditions(self):
        assert evapotranspiration_factor(20, 30) == pytest.approx(1.0)

    def test_hot_dry(self):
        assert evapotranspiration_factor(38, 25) == pytest.approx(1.95)

    def test_default_weather(self):
        assert evapotranspiration_factor(28, 55) == pytest.approx(1.15)

    def test_upper_clamp(self):
        assert evapotranspiration_factor(60, 0) == 2.0

    def test_lower_clamp(self):
        assert evapotranspiration_factor(0, 100) == 0.5

    def test_increases_with_temperature(self):
        values = [evapotranspiration_factor(t, 50) for t in range(0, 50)]

        assert values == sorted(values)


# ============================================================
# Weather Multiplier Tests
# ============================================================

class TestWeatherMultiplier:
    """Tests for the weather condition multiplier."""

    def test_neutral(self):
        assert weather_multiplier(snapshot()) == 1.0

    def test_hot(self):
        assert weather_multiplier(snapshot(temperature=36)) == pytest.approx(1.15)

    def test_exactly_35_is_not_hot(self):
        assert weather_multiplier(snapshot(temperature=35)) == 1.0

    def test_dry_air(self):
        assert weather_multiplier(snapshot(humidity=25)) == pytest.approx(1.1)

    def test_hot_and_dry(self):
        assert weather_multiplier(snapshot(temperature=38, humidity=25)) == pytest.approx(1.265)

    @pytest.mark.parametrize("condition", ["Heavy Rain", "heavy rain showers", "Downpour"])
    def test_heavy_rain(self, condition):
        assert weather_multiplier(snapshot(condition=condition)) == pytest.approx(0.25)

    @pytest.mark.parametrize("condition", ["Rain", "Light Rain", "Freezing rain"])
    def test_rain(self, condition):
        assert weather_multiplier(snapshot(condition=condition)) == pytest.approx(0.6)


# ============================================================
# Rain Adjustment Tests
# ============================================================

class TestRainAdjustment:
    """Tests for the rain adjustment fraction."""

    def test_no_rain(self):
        assert rain_adjustment_fraction(snapshot()) == 0.0

    def test_strong_rain_short_circuits(self):
        assert rain_adjustment_fraction(snapshot(rain_mm=10.0)) == 0.9
        assert rain_adjustment_fraction(snapshot(rain_mm=25.0, probability=0)) == 0.9

    def test_moderate_rain(self):
        assert rain_adjustment_fraction(snapshot(rain_mm=5.0)) == 0.5
        assert rain_adjustment_fraction(snapshot(rain_mm=9.9)) == 0.5

    def test_light_rain(self):
        assert rain_adjustment_fraction(snapshot(rain_mm=2.0)) == 0.0

    def test_probability(self):
        assert rain_adjustment_fraction(snapshot(probability=50)) == pytest.approx(0.4)
        assert rain_adjustment_fraction(snapshot(probability=100)) == pytest.approx(0.8)

    def test_probability_raises_floor(self):
        assert rain_adjustment_fraction(snapshot(rain_mm=6.0, probability=90)) == pytest.approx(0.72)

    def test_probability_below_rain_floor(self):
        assert rain_adjustment_fraction(snapshot(rain_mm=6.0, probability=20)) == 0.5

    def test_rain_text_without_structured_data(self):
        assert rain_adjustment_fraction(snapshot(condition="Light Rain")) == 0.35

    def test_rain_text_ignored_with_structured_data(self):
        assert rain_adjustment_fraction(snapshot(condition="Light Rain", rain_mm=0.0)) == 0.0

    def test_custom_thresholds(self):
        config = EngineConfig(rain_reduction_threshold_mm=2.0, strong_rain_reduction_mm=4.0)

        assert rain_adjustment_fraction(snapshot(rain_mm=3.0), config) == 0.5
        assert rain_adjustment_fraction(snapshot(rain_mm=4.0), config) == 0.9

    def test_always_bounded(self):
        """Fraction stays in [0, 0.9] for any input combination."""
        rains = [None, 0.0, 1.0, 5.0, 9.99, 10.0, 500.0]
        probabilities = [None, 0.0, 30.0, 100.0, 250.0]
        conditions = ["Clear", "Rain", "Heavy Rain"]
        factors = [0.8, 1.0, 5.0]

        for rain, probability, condition, factor in itertools.product(
            rains, probabilities, conditions, factors
        ):
            config = EngineConfig(rain_probability_reduction_factor=factor)
            fraction = rain_adjustment_fraction(
                snapshot(condition=condition, rain_mm=rain, probability=probability), config
            )
            assert 0.0 <= fraction <= 0.9


# ============================================================
# Configuration Tests
# ============================================================

class TestEngineConfig:
    """Tests for the immutable engine configuration."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.min_liters_per_m2 == 2.0
        assert config.max_liters_per_m2 == 20.0
        assert config.external_confidence_threshold == 60.0
        assert config.crop_coefficient_table["rice"] == 1.2

    def test_frozen(self):
        config = EngineConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.min_liters_per_m2 = 5.0

    def test_tables_read_only(self):
        config = EngineConfig()

        with pytest.raises(TypeError):
            config.crop_coefficient_table["rice"] = 3.0

    def test_caller_table_copied(self):
        table = {"rice": 1.3, "default": 1.0}
        config = EngineConfig(crop_coefficient_table=table)
        table["rice"] = 9.9

        assert config.crop_coefficient_table["rice"] == 1.3

    def test_missing_default_key_added(self):
        config = EngineConfig(crop_coefficient_table={"rice": 1.3})

        assert config.crop_coefficient_table["default"] == 1.0

    def test_invalid_bounds(self):
        with pytest.raises(ValueError, match="bounds"):
            EngineConfig(min_liters_per_m2=10.0, max_liters_per_m2=5.0)

    def test_from_settings(self):
        settings = Settings(min_liters_per_m2=1.0, max_liters_per_m2=12.0)

        config = EngineConfig.from_settings(settings)

        assert config.min_liters_per_m2 == 1.0
        assert config.max_liters_per_m2 == 12.0
        assert config.crop_coefficient_table["wheat"] == 1.15


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
