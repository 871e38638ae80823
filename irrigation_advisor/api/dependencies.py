"""
Dependency injection for FastAPI.
"""
from functools import lru_cache
from typing import Annotated, Optional
from fastapi import Depends

from irrigation_advisor.infrastructure.weather_client import (
    WeatherClient,
    get_weather_client,
)
from irrigation_advisor.services.application.advisory_service import AdvisoryService
from irrigation_advisor.services.domain.engine_config import EngineConfig
from irrigation_advisor.services.domain.recommendation_engine import RecommendationEngine
from irrigation_advisor.services.domain.soil_classifier import SoilModelBackend


@lru_cache()
def get_recommendation_engine() -> RecommendationEngine:
    """
    Dependency factory for RecommendationEngine.

    The engine configuration is read once from settings and shared.

    Returns:
        RecommendationEngine instance
    """
    return RecommendationEngine(EngineConfig.from_settings())


def get_soil_model() -> Optional[SoilModelBackend]:
    """
    Dependency factory for the external soil classifier.

    No model ships with the service; deployments override this dependency
    to plug in an inference runtime.

    Returns:
        SoilModelBackend instance, or None for rule-based classification only
    """
    return None


def get_advisory_service(
    weather_client: Annotated[WeatherClient, Depends(get_weather_client)],
    engine: Annotated[RecommendationEngine, Depends(get_recommendation_engine)],
    soil_model: Annotated[Optional[SoilModelBackend], Depends(get_soil_model)],
) -> AdvisoryService:
    """
    Dependency factory for AdvisoryService.

    Args:
        weather_client: Weather API client (injected)
        engine: Recommendation engine (injected)
        soil_model: External soil classifier (injected)

    Returns:
        AdvisoryService instance
    """
    return AdvisoryService(weather_client=weather_client, engine=engine, soil_model=soil_model)


# Type aliases for cleaner route signatures
AdvisoryServiceDep = Annotated[AdvisoryService, Depends(get_advisory_service)]
