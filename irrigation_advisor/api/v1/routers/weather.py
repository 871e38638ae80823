"""
API router for weather endpoints.
"""
from typing import Annotated
from fastapi import APIRouter, Path, Request

from irrigation_advisor.api.dependencies import AdvisoryServiceDep
from irrigation_advisor.api.rate_limit import DEFAULT_LIMIT, limiter
from irrigation_advisor.api.v1.models.responses import WeatherResponse

router = APIRouter(
    prefix="/weather",
    tags=["weather"],
)


@router.get(
    "/{location}",
    response_model=WeatherResponse,
    summary="Get current weather",
    responses={
        429: {"description": "Rate limit exceeded"},
        502: {"description": "Weather provider failure"},
    },
)
@limiter.limit(DEFAULT_LIMIT)
async def get_weather(
    request: Request,
    location: Annotated[str, Path(description="City name, e.g. 'Lahore'")],
    advisory_service: AdvisoryServiceDep,
) -> WeatherResponse:
    """
    Current weather as used by the recommendation engine.

    Provider failures surface as 502 through the error handling middleware.
    """
    snapshot = await advisory_service.get_weather(location)
    return WeatherResponse(**snapshot.model_dump())
