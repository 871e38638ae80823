"""
Unit tests for soil/crop classification.

Tests cover:
- Rule-based soil condition ladder and moisture formulas
- Crop health ladder
- Overall confidence scoring
- External label mapping
- Confidence fallback policy
"""
import logging
import pytest
from unittest.mock import MagicMock

from irrigation_advisor.domain.models import (
    ClassificationStrategy,
    CropHealth,
    ExternalClassifierResult,
    ImageFeatures,
    SoilAssessment,
    SoilCondition,
    SoilReading,
    SoilType,
)
from irrigation_advisor.services.domain.engine_config import EngineConfig
from irrigation_advisor.services.domain.soil_classifier import (
    ExternalModelClassifier,
    FallbackClassifier,
    RuleBasedClassifier,
    classify_reading,
)


def features(brightness=100.0, green=0.0, brown=0.0, dark=0.0) -> ImageFeatures:
    return ImageFeatures(
        avg_brightness=brightness, green_pct=green, brown_pct=brown, dark_soil_pct=dark
    )


# ============================================================
# Rule-Based Soil Tests
# ============================================================

class TestRuleBasedSoil:
    """Tests for the ordered soil condition rules."""

    def test_wet(self):
        soil = RuleBasedClassifier.assess_soil(features(brightness=40, dark=70))

        assert soil.condition == SoilCondition.WET
        assert soil.moisture == 100  # 80 + 30, clamped

    def test_wet_just_below_brightness_limit(self):
        soil = RuleBasedClassifier.assess_soil(features(brightness=49, dark=90))

        assert soil.condition == SoilCondition.WET
        assert soil.moisture == 100  # 80 + int(25.5) = 105 -> 100

    def test_moist(self):
        soil = RuleBasedClassifier.assess_soil(features(brightness=70, dark=40))

        assert soil.condition == SoilCondition.MOIST
        assert soil.moisture == 45

    def test_dry(self, dry_features):
        soil = RuleBasedClassifier.assess_soil(dry_features)

        assert soil.condition == SoilCondition.DRY
        assert soil.moisture == 20
        assert soil.label == "Dry"
        assert soil.soil_type == SoilType.OTHER

    def test_dry_clamped_at_zero(self):
        soil = RuleBasedClassifier.assess_soil(features(brightness=200, brown=80))

        assert soil.condition == SoilCondition.DRY
        assert soil.moisture == 0

    def test_moderate(self):
        soil = RuleBasedClassifier.assess_soil(features(brightness=140, green=50))

        assert soil.condition == SoilCondition.MODERATE
        assert soil.moisture == 30

    def test_rule_order_wet_before_moist(self):
        """Wet conditions also satisfy the Moist rule; Wet must win."""
        soil = RuleBasedClassifier.assess_soil(features(brightness=30, dark=65, brown=50))

        assert soil.condition == SoilCondition.WET

    def test_dark_but_bright_is_not_wet(self):
        soil = RuleBasedClassifier.assess_soil(features(brightness=60, dark=70))

        assert soil.condition == SoilCondition.MOIST

    @pytest.mark.parametrize("brightness", [0, 25, 50, 80, 100, 150, 200, 255])
    @pytest.mark.parametrize("dark", [0, 35, 65, 100])
    @pytest.mark.parametrize("brown", [0, 50])
    def test_moisture_always_in_range(self, brightness, dark, brown):
        soil = RuleBasedClassifier.assess_soil(features(brightness=brightness, dark=dark, brown=brown))

        assert 0 <= soil.moisture <= 100


# ============================================================
# Crop Health Tests
# ============================================================

class TestRuleBasedCrop:
    """Tests for crop health derived from vegetation coverage."""

    @pytest.mark.parametrize("green,health,confidence", [
        (65, CropHealth.HEALTHY, 85.0),
        (60, CropHealth.MODERATE, 70.0),
        (35, CropHealth.MODERATE, 70.0),
        (15, CropHealth.STRESSED, 60.0),
        (5, CropHealth.POOR, 50.0),
        (2, CropHealth.NO_CROP_DETECTED, 40.0),
        (0, CropHealth.NO_CROP_DETECTED, 40.0),
    ])
    def test_health_ladder(self, green, health, confidence):
        crop = RuleBasedClassifier.assess_crop(features(green=green))

        assert crop.health == health
        assert crop.confidence == confidence


# ============================================================
# Confidence Tests
# ============================================================

class TestConfidence:
    """Tests for overall rule-based confidence."""

    def test_base_confidence(self):
        assert RuleBasedClassifier.overall_confidence(features()) == 60.0

    def test_decisive_coverage(self):
        assert RuleBasedClassifier.overall_confidence(features(brown=50)) == 80.0
        assert RuleBasedClassifier.overall_confidence(features(green=35)) == 80.0

    def test_partial_dark_soil(self):
        assert RuleBasedClassifier.overall_confidence(features(dark=50)) == 75.0
        assert RuleBasedClassifier.overall_confidence(features(dark=20)) == 60.0
        assert RuleBasedClassifier.overall_confidence(features(dark=80)) == 60.0

    def test_capped(self):
        assert RuleBasedClassifier.overall_confidence(features(green=35, dark=50)) == 95.0


# ============================================================
# Out-of-Range Input Tests
# ============================================================

class TestClamping:
    """Out-of-range values are clamped rather than rejected."""

    def test_soil_moisture_clamped(self):
        assert SoilAssessment(label="x", moisture=140).moisture == 100
        assert SoilAssessment(label="x", moisture=-5).moisture == 0

    def test_external_confidence_clamped(self):
        assert ExternalClassifierResult(label="Peat Soil", confidence_pct=120).confidence_pct == 100.0
        assert ExternalClassifierResult(label="Peat Soil", confidence_pct=-3).confidence_pct == 0.0


# ============================================================
# External Classifier Tests
# ============================================================

class TestExternalModelClassifier:
    """Tests for label to moisture mapping."""

    @pytest.mark.parametrize("label,soil_type,moisture", [
        ("Black Soil", SoilType.BLACK, 60),
        ("Cinder Soil", SoilType.CINDER, 40),
        ("Laterite Soil", SoilType.LATERITE, 30),
        ("Peat Soil", SoilType.PEAT, 70),
        ("Yellow Soil", SoilType.YELLOW, 50),
        ("Alluvial Soil", SoilType.OTHER, 50),
    ])
    def test_label_mapping(self, label, soil_type, moisture):
        classifier = ExternalModelClassifier()

        result = classifier.from_result(ExternalClassifierResult(label=label, confidence_pct=90))

        assert result.soil.soil_type == soil_type
        assert result.soil.moisture == moisture
        assert result.soil.label == label
        assert result.crop.health == CropHealth.UNKNOWN
        assert result.strategy == ClassificationStrategy.EXTERNAL_MODEL
        assert result.confidence == 90.0

    def test_classify_uses_backend(self, brown_image):
        backend = MagicMock()
        backend.predict.return_value = ExternalClassifierResult(label="Peat Soil", confidence_pct=88)
        classifier = ExternalModelClassifier(backend)

        result = classifier.classify(brown_image)

        backend.predict.assert_called_once()
        assert result.soil.soil_type == SoilType.PEAT

    def test_classify_without_backend(self, brown_image):
        with pytest.raises(RuntimeError, match="backend"):
            ExternalModelClassifier().classify(brown_image)

    def test_injected_moisture_table(self):
        config = EngineConfig(soil_moisture_table={SoilType.PEAT: 90})
        classifier = ExternalModelClassifier(config=config)

        result = classifier.from_result(ExternalClassifierResult(label="peat", confidence_pct=70))

        assert result.soil.moisture == 90


# ============================================================
# Fallback Policy Tests
# ============================================================

class TestFallbackPolicy:
    """Tests for the confidence threshold fallback."""

    @pytest.fixture
    def backend(self):
        return MagicMock()

    @pytest.fixture
    def classifier(self, backend):
        return FallbackClassifier(ExternalModelClassifier(backend))

    def test_confidence_59_uses_rules(self, classifier, backend, brown_image):
        backend.predict.return_value = ExternalClassifierResult(label="Peat Soil", confidence_pct=59)

        result = classifier.classify(brown_image)

        assert result.strategy == ClassificationStrategy.RULE_BASED
        assert result.fallback_used is True
        assert result.soil.condition == SoilCondition.DRY
        assert result.soil.soil_type == SoilType.OTHER

    def test_confidence_60_uses_model(self, classifier, backend, brown_image):
        backend.predict.return_value = ExternalClassifierResult(label="Peat Soil", confidence_pct=60)

        result = classifier.classify(brown_image)

        assert result.strategy == ClassificationStrategy.EXTERNAL_MODEL
        assert result.fallback_used is False
        assert result.soil.moisture == 70

    def test_fallback_discards_model_result(self, classifier, dry_features):
        """No part of a rejected model result may leak into the output."""
        rejected = ExternalClassifierResult(label="Peat Soil", confidence_pct=10)

        result = classifier.resolve(rejected, dry_features)
        rules_only = RuleBasedClassifier().classify_features(dry_features)

        assert result.soil == rules_only.soil
        assert result.crop == rules_only.crop
        assert result.confidence == rules_only.confidence
        assert "Peat" not in result.soil.label

    def test_fallback_is_logged(self, classifier, dry_features, caplog):
        rejected = ExternalClassifierResult(label="Peat Soil", confidence_pct=42)

        with caplog.at_level(logging.WARNING):
            classifier.resolve(rejected, dry_features)

        assert "Classification fallback" in caplog.text

    def test_resolve_without_features(self, classifier):
        rejected = ExternalClassifierResult(label="Peat Soil", confidence_pct=10)

        with pytest.raises(ValueError, match="features"):
            classifier.resolve(rejected)

    def test_configurable_threshold(self, backend, dry_features):
        config = EngineConfig(external_confidence_threshold=80.0)
        classifier = FallbackClassifier(ExternalModelClassifier(backend, config))

        result = classifier.resolve(
            ExternalClassifierResult(label="Peat Soil", confidence_pct=75), dry_features
        )

        assert result.fallback_used is True


# ============================================================
# Soil Reading Tests
# ============================================================

class TestClassifyReading:
    """Tests for directly reported readings."""

    @pytest.mark.parametrize("condition,expected", [
        ("Dry", SoilCondition.DRY),
        ("  moist ", SoilCondition.MOIST),
        ("WET", SoilCondition.WET),
        ("Cracked", SoilCondition.UNKNOWN),
    ])
    def test_condition_matching(self, condition, expected):
        result = classify_reading(SoilReading(condition=condition, moisture_pct=30))

        assert result.soil.condition == expected
        assert result.soil.label == condition.strip()

    def test_soil_type_from_label(self):
        result = classify_reading(SoilReading(condition="Peat", moisture_pct=65))

        assert result.soil.soil_type == SoilType.PEAT
        assert result.soil.condition == SoilCondition.UNKNOWN
        assert result.soil.moisture == 65

    def test_crop_health_unknown(self):
        result = classify_reading(SoilReading(condition="Dry", moisture_pct=10))

        assert result.crop.health == CropHealth.UNKNOWN
        assert result.crop.confidence == 0.0
        assert result.confidence == 50.0
        assert result.strategy == ClassificationStrategy.MANUAL_READING
        assert result.fallback_used is False

    def test_blank_condition(self):
        result = classify_reading(SoilReading(condition="   ", moisture_pct=40))

        assert result.soil.label == "Unknown"
        assert result.soil.soil_type == SoilType.OTHER

    @pytest.mark.parametrize("reported,clamped", [(-5, 0), (140, 100), (37.9, 37)])
    def test_moisture_clamped(self, reported, clamped):
        result = classify_reading(SoilReading(condition="Dry", moisture_pct=reported))

        assert result.soil.moisture == clamped


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
