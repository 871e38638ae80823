"""
Application service: Orchestration layer for irrigation advice.
"""
from typing import Optional
import logging

from fastapi.concurrency import run_in_threadpool

from irrigation_advisor.domain.exceptions import WeatherAPIError
from irrigation_advisor.domain.models import (
    DEFAULT_WEATHER,
    ExternalClassifierResult,
    ImageFeatures,
    IrrigationPlan,
    SoilReading,
    WeatherSnapshot,
)
from irrigation_advisor.infrastructure.image_decoder import decode_image
from irrigation_advisor.infrastructure.weather_client import WeatherClient
from irrigation_advisor.services.domain.recommendation_engine import RecommendationEngine
from irrigation_advisor.services.domain.soil_classifier import (
    ExternalModelClassifier,
    FallbackClassifier,
    SoilClassifier,
    SoilModelBackend,
    classify_reading,
)

logger = logging.getLogger(__name__)


class AdvisoryService:
    """
    Application service for irrigation recommendations.

    Orchestrates image decoding, weather retrieval and the recommendation
    engine. No agronomic logic here, only coordination between
    infrastructure and domain layers.
    """

    def __init__(
        self,
        weather_client: WeatherClient,
        engine: RecommendationEngine,
        soil_model: Optional[SoilModelBackend] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            weather_client: Weather API client
            engine: Recommendation engine
            soil_model: Optional external soil classifier runtime
        """
        self.weather_client = weather_client
        self.engine = engine
        self.soil_model = soil_model
        self.classifier: SoilClassifier = engine.rule_based
        if soil_model is not None:
            self.classifier = FallbackClassifier(
                ExternalModelClassifier(backend=soil_model, config=engine.config),
                rule_based=engine.rule_based,
                config=engine.config,
            )

    async def fetch_weather(self, location: str) -> WeatherSnapshot:
        """
        Fetch weather, falling back to the default snapshot on any failure.

        Args:
            location: City name

        Returns:
            Live or default WeatherSnapshot
        """
        if not self.weather_client.api_key:
            logger.warning("Weather API key not configured, using default weather")
            return DEFAULT_WEATHER

        try:
            return await self.weather_client.get_current_weather(location)
        except WeatherAPIError as e:
            logger.warning(f"Could not fetch weather for {location}, using defaults: {e.message}")
            return DEFAULT_WEATHER

    async def get_weather(self, location: str) -> WeatherSnapshot:
        """
        Fetch live weather without fallback.

        Raises:
            WeatherAPIError: If the provider request fails
        """
        return await self.weather_client.get_current_weather(location)

    async def analyze_image(
        self,
        image_bytes: bytes,
        location: str,
        crop_type: Optional[str] = None,
        field_area_m2: Optional[float] = None,
    ) -> IrrigationPlan:
        """
        Produce a recommendation from an uploaded photograph.

        This method orchestrates:
        1. Decoding and classifying the image in a worker thread
           (external model first when configured)
        2. Fetching weather for the location
        3. Running the recommendation engine

        Args:
            image_bytes: Encoded JPEG/PNG image
            location: City name for the weather lookup
            crop_type: Optional crop name
            field_area_m2: Optional field area (m²)

        Returns:
            IrrigationPlan

        Raises:
            InvalidFeatureData: If the image cannot be decoded
        """
        rgb = await run_in_threadpool(decode_image, image_bytes)
        classification = await run_in_threadpool(self.classifier.classify, rgb)
        logger.info(
            f"Classified image as '{classification.soil.label}' via "
            f"{classification.strategy.value} ({classification.confidence:.1f}%)"
        )

        weather = await self.fetch_weather(location)

        return self.engine.plan_for(
            classification,
            crop_type=crop_type,
            field_area_m2=field_area_m2,
            weather=weather,
        )

    def compute(
        self,
        features: Optional[ImageFeatures] = None,
        external_result: Optional[ExternalClassifierResult] = None,
        soil_reading: Optional[SoilReading] = None,
        crop_type: Optional[str] = None,
        field_area_m2: Optional[float] = None,
        weather: Optional[WeatherSnapshot] = None,
    ) -> IrrigationPlan:
        """Produce a recommendation from pre-computed inputs, without network calls."""
        return self.engine.compute_recommendation(
            features=features,
            external_result=external_result,
            soil_reading=soil_reading,
            crop_type=crop_type,
            field_area_m2=field_area_m2,
            weather=weather,
        )

    async def recommend_from_reading(
        self,
        reading: SoilReading,
        location: str,
        crop_type: Optional[str] = None,
        field_area_m2: Optional[float] = None,
    ) -> IrrigationPlan:
        """
        Produce a recommendation from a reported soil condition and moisture.

        Weather is fetched for the location with the usual fallback.

        Args:
            reading: Soil condition label and moisture percentage
            location: City name for the weather lookup
            crop_type: Optional crop name
            field_area_m2: Optional field area (m²)

        Returns:
            IrrigationPlan
        """
        classification = classify_reading(reading)
        weather = await self.fetch_weather(location)

        return self.engine.plan_for(
            classification,
            crop_type=crop_type,
            field_area_m2=field_area_m2,
            weather=weather,
        )
