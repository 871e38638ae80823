"""
Domain service: soil and crop classification.

Two interchangeable strategies sit behind the SoilClassifier interface:

- RuleBasedClassifier: ordered threshold tests on extracted image features
- ExternalModelClassifier: maps a pre-trained model's soil label to a
  moisture estimate

FallbackClassifier composes them: a model result whose confidence is below
the configured threshold is discarded and the image is reclassified by the
rules. Results from the two strategies are never mixed.

Readings reported directly by a farmer or moisture meter bypass both strategies
(classify_reading).
"""
from abc import ABC, abstractmethod
from typing import Optional, Protocol
import logging
import numpy as np

from irrigation_advisor.domain.models import (
    Classification,
    ClassificationStrategy,
    CropAssessment,
    CropHealth,
    ExternalClassifierResult,
    ImageFeatures,
    SoilAssessment,
    SoilCondition,
    SoilReading,
    SoilType,
)
from irrigation_advisor.services.domain.engine_config import EngineConfig
from irrigation_advisor.services.domain.feature_extractor import extract_features

logger = logging.getLogger(__name__)

# (minimum green %, health, confidence), checked in order
CROP_HEALTH_LADDER = (
    (60.0, CropHealth.HEALTHY, 85.0),
    (30.0, CropHealth.MODERATE, 70.0),
    (10.0, CropHealth.STRESSED, 60.0),
    (2.0, CropHealth.POOR, 50.0),
)

BASE_CONFIDENCE = 60.0
MAX_CONFIDENCE = 95.0

# Farmer and meter readings carry no image evidence
READING_CONFIDENCE = 50.0


def classify_reading(reading: SoilReading) -> Classification:
    """
    Build a classification from a directly reported soil reading.

    The condition text is matched to a known SoilCondition when possible
    and to a soil type by substring; crop health is unknown.

    Args:
        reading: Reported condition and moisture

    Returns:
        Classification attributed to the manual reading
    """
    label = reading.condition.strip() or SoilCondition.UNKNOWN.value
    condition = next(
        (c for c in SoilCondition if c.value.lower() == label.lower()),
        SoilCondition.UNKNOWN,
    )

    return Classification(
        soil=SoilAssessment(
            condition=condition,
            soil_type=SoilType.from_label(label),
            label=label,
            moisture=reading.moisture_pct,
        ),
        crop=CropAssessment(health=CropHealth.UNKNOWN, confidence=0.0),
        confidence=READING_CONFIDENCE,
        strategy=ClassificationStrategy.MANUAL_READING,
    )


class SoilModelBackend(Protocol):
    """Inference runtime wrapping a pre-trained soil image classifier."""

    def predict(self, rgb: np.ndarray) -> ExternalClassifierResult:
        ...


class SoilClassifier(ABC):
    """Classifies a decoded RGB image into soil and crop assessments."""

    @abstractmethod
    def classify(self, rgb: np.ndarray) -> Classification:
        ...


class RuleBasedClassifier(SoilClassifier):
    """Threshold rules over brightness and colour coverage. Always available."""

    def classify(self, rgb: np.ndarray) -> Classification:
        return self.classify_features(extract_features(rgb))

    def classify_features(self, features: ImageFeatures) -> Classification:
        """
        Classify pre-computed image features.

        Args:
            features: Features of one image

        Returns:
            Rule-based Classification
        """
        soil = self.assess_soil(features)
        crop = self.assess_crop(features)
        confidence = self.overall_confidence(features)

        logger.debug(
            f"Rule-based classification: soil={soil.condition.value} "
            f"moisture={soil.moisture}, crop={crop.health.value}, confidence={confidence}"
        )
        return Classification(
            soil=soil,
            crop=crop,
            confidence=confidence,
            strategy=ClassificationStrategy.RULE_BASED,
        )

    @staticmethod
    def assess_soil(features: ImageFeatures) -> SoilAssessment:
        """Darker soil reads as wetter, bright brown soil as dry."""
        brightness = features.avg_brightness

        if features.dark_soil_pct > 60 and brightness < 50:
            condition = SoilCondition.WET
            moisture = 80 + int((100 - brightness) / 2)
        elif features.dark_soil_pct > 30 and brightness < 100:
            condition = SoilCondition.MOIST
            moisture = 40 + int((80 - brightness) / 2)
        elif features.brown_pct > 40 and brightness > 80:
            condition = SoilCondition.DRY
            moisture = 10 + int((150 - brightness) / 3)
        else:
            condition = SoilCondition.MODERATE
            moisture = int(50 + (80 - brightness) / 3)

        return SoilAssessment(
            condition=condition,
            soil_type=SoilType.OTHER,
            label=condition.value,
            moisture=moisture,
        )

    @staticmethod
    def assess_crop(features: ImageFeatures) -> CropAssessment:
        for min_green, health, confidence in CROP_HEALTH_LADDER:
            if features.green_pct > min_green:
                return CropAssessment(health=health, confidence=confidence)
        return CropAssessment(health=CropHealth.NO_CROP_DETECTED, confidence=40.0)

    @staticmethod
    def overall_confidence(features: ImageFeatures) -> float:
        confidence = BASE_CONFIDENCE
        if features.green_pct > 30 or features.brown_pct > 40:
            confidence += 20
        if 20 < features.dark_soil_pct < 80:
            confidence += 15
        return min(MAX_CONFIDENCE, confidence)


class ExternalModelClassifier(SoilClassifier):
    """Soil classification by an external pre-trained model."""

    def __init__(
        self,
        backend: Optional[SoilModelBackend] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            backend: Model runtime; without one only from_result is usable
            config: Engine configuration with the label moisture table
        """
        self.backend = backend
        self.config = config or EngineConfig()

    def predict(self, rgb: np.ndarray) -> ExternalClassifierResult:
        if self.backend is None:
            raise RuntimeError("No soil model backend is configured")
        return self.backend.predict(rgb)

    def classify(self, rgb: np.ndarray) -> Classification:
        return self.from_result(self.predict(rgb))

    def from_result(self, result: ExternalClassifierResult) -> Classification:
        """
        Map a model label to a moisture estimate.

        Args:
            result: Label and confidence returned by the model

        Returns:
            Classification attributed to the external model
        """
        soil_type = SoilType.from_label(result.label)
        moisture = self.config.soil_moisture_table[soil_type]

        return Classification(
            soil=SoilAssessment(
                condition=SoilCondition.UNKNOWN,
                soil_type=soil_type,
                label=result.label,
                moisture=moisture,
            ),
            crop=CropAssessment(health=CropHealth.UNKNOWN, confidence=0.0),
            confidence=result.confidence_pct,
            strategy=ClassificationStrategy.EXTERNAL_MODEL,
        )


class FallbackClassifier(SoilClassifier):
    """
    Prefer the external model; fall back to the rules on low confidence.

    The acceptance boundary is inclusive: a model confidence equal to the
    threshold is accepted.
    """

    def __init__(
        self,
        external: ExternalModelClassifier,
        rule_based: Optional[RuleBasedClassifier] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.external = external
        self.rule_based = rule_based or RuleBasedClassifier()
        self.config = config or external.config

    @property
    def threshold(self) -> float:
        return self.config.external_confidence_threshold

    def accepts(self, result: ExternalClassifierResult) -> bool:
        return result.confidence_pct >= self.threshold

    def classify(self, rgb: np.ndarray) -> Classification:
        result = self.external.predict(rgb)
        if self.accepts(result):
            return self.external.from_result(result)
        return self._fall_back(result, extract_features(rgb))

    def resolve(
        self,
        result: ExternalClassifierResult,
        features: Optional[ImageFeatures] = None,
    ) -> Classification:
        """
        Apply the fallback policy to a model result computed elsewhere.

        Args:
            result: External model output
            features: Features of the same image, used only on fallback

        Returns:
            Classification from exactly one strategy

        Raises:
            ValueError: If the result is rejected and no features are given
        """
        if self.accepts(result):
            return self.external.from_result(result)
        if features is None:
            raise ValueError("Rule-based fallback requires image features")
        return self._fall_back(result, features)

    def _fall_back(
        self,
        result: ExternalClassifierResult,
        features: ImageFeatures,
    ) -> Classification:
        logger.warning(
            f"Classification fallback: model label '{result.label}' confidence "
            f"{result.confidence_pct:.1f} < {self.threshold:.1f}, using rule-based classifier"
        )
        classification = self.rule_based.classify_features(features)
        return classification.model_copy(update={"fallback_used": True})
