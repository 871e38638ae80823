"""
Domain service: irrigation recommendation engine.

Composes the pipeline end to end:
1. Resolve a classification (a direct soil reading, rule-based features,
   or an external model result with the confidence fallback)
2. Pick the weather snapshot (default snapshot when none is available)
3. Compute the bounded water demand
4. Classify urgency and schedule the next check
5. Render the farmer message and the technical breakdown

The engine keeps no per-request state; one instance can serve concurrent
requests.
"""
from datetime import datetime, timezone
from typing import Optional
import logging

from irrigation_advisor.domain.models import (
    DEFAULT_WEATHER,
    Classification,
    ExternalClassifierResult,
    ImageFeatures,
    IrrigationPlan,
    SoilReading,
    WeatherSnapshot,
)
from irrigation_advisor.services.domain.engine_config import (
    DEFAULT_TABLE_KEY,
    EngineConfig,
)
from irrigation_advisor.services.domain.recommendation_text import (
    build_farmer_message,
    build_technical_breakdown,
)
from irrigation_advisor.services.domain.soil_classifier import (
    ExternalModelClassifier,
    FallbackClassifier,
    RuleBasedClassifier,
    classify_reading,
)
from irrigation_advisor.services.domain.urgency import classify_urgency, next_check_at
from irrigation_advisor.services.domain.water_demand import calculate_water_demand

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """
    Turns an image assessment and a weather snapshot into an IrrigationPlan.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Engine configuration; built-in defaults when omitted
        """
        self.config = config or EngineConfig()
        self.rule_based = RuleBasedClassifier()
        self.external = ExternalModelClassifier(config=self.config)
        self.fallback = FallbackClassifier(self.external, self.rule_based, self.config)

        logger.info(
            f"Initialized RecommendationEngine with bounds "
            f"[{self.config.min_liters_per_m2}, {self.config.max_liters_per_m2}] L/m², "
            f"confidence threshold={self.config.external_confidence_threshold}"
        )

    def classify(
        self,
        features: Optional[ImageFeatures] = None,
        external_result: Optional[ExternalClassifierResult] = None,
        soil_reading: Optional[SoilReading] = None,
    ) -> Classification:
        """
        Resolve the classification for one assessment.

        A direct soil reading takes precedence over image-derived inputs.
        A model result below the confidence threshold is replaced by the
        rule-based classification, which requires features.

        Raises:
            ValueError: If no input is given, or a low-confidence
                model result arrives without features to fall back on
        """
        if soil_reading is not None:
            return classify_reading(soil_reading)

        if external_result is not None:
            if features is None and not self.fallback.accepts(external_result):
                raise ValueError(
                    f"Model confidence {external_result.confidence_pct:.1f} is below "
                    f"{self.config.external_confidence_threshold:.1f} and no image "
                    f"features were supplied for the rule-based fallback"
                )
            return self.fallback.resolve(external_result, features)

        if features is None:
            raise ValueError(
                "One of image features, an external classifier result or a soil reading is required"
            )
        return self.rule_based.classify_features(features)

    def compute_recommendation(
        self,
        features: Optional[ImageFeatures] = None,
        external_result: Optional[ExternalClassifierResult] = None,
        soil_reading: Optional[SoilReading] = None,
        crop_type: Optional[str] = None,
        field_area_m2: Optional[float] = None,
        weather: Optional[WeatherSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> IrrigationPlan:
        """
        Compute an irrigation plan.

        Args:
            features: Extracted image features (rule-based path)
            external_result: External classifier output
            soil_reading: Reported soil condition and moisture; overrides the others
            crop_type: Crop name; blank or missing uses the default entry
            field_area_m2: Field area; totals are computed only when > 0
            weather: Current weather; the default snapshot when None
            now: Reference time for scheduling; current UTC time when omitted

        Returns:
            IrrigationPlan
        """
        classification = self.classify(features, external_result, soil_reading)
        return self.plan_for(classification, crop_type, field_area_m2, weather, now)

    def plan_for(
        self,
        classification: Classification,
        crop_type: Optional[str] = None,
        field_area_m2: Optional[float] = None,
        weather: Optional[WeatherSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> IrrigationPlan:
        """Compute an irrigation plan for an already resolved classification."""
        now = now or datetime.now(timezone.utc)
        crop = (crop_type or "").strip() or DEFAULT_TABLE_KEY

        if weather is None:
            logger.info("No weather snapshot supplied, using default weather")
            weather = DEFAULT_WEATHER

        if field_area_m2 is not None and field_area_m2 <= 0:
            logger.debug(f"Ignoring non-positive field area {field_area_m2}")
            field_area_m2 = None

        soil = classification.soil
        demand = calculate_water_demand(
            moisture=soil.moisture,
            soil_type=soil.soil_type,
            crop_type=crop,
            weather=weather,
            field_area_m2=field_area_m2,
            config=self.config,
        )
        urgency = classify_urgency(demand.water_per_area_l)

        plan = IrrigationPlan(
            crop_type=crop,
            classification=classification,
            weather=weather,
            water_per_area_l=demand.water_per_area_l,
            field_area_m2=field_area_m2,
            total_water_l=demand.total_water_l,
            urgency=urgency,
            next_check_at=next_check_at(urgency, now),
            farmer_message=build_farmer_message(
                crop_type=crop,
                soil_label=soil.label,
                water_per_area_l=demand.water_per_area_l,
                total_water_l=demand.total_water_l,
                urgency=urgency,
                weather=weather,
                crop_health=classification.crop.health,
            ),
            technical_breakdown=build_technical_breakdown(
                demand.breakdown, demand.water_per_area_l
            ),
            breakdown=demand.breakdown,
            calculated_at=now,
        )

        logger.info(
            f"Recommendation: {plan.water_per_area_l} L/m² ({urgency.value}) for "
            f"crop={crop}, soil={soil.label}, strategy={classification.strategy.value}, "
            f"fallback={classification.fallback_used}"
        )
        return plan
