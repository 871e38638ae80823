"""
API router for irrigation recommendation endpoints.
"""
from typing import Annotated, Optional
import logging
from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile

from irrigation_advisor.api.dependencies import AdvisoryServiceDep
from irrigation_advisor.api.rate_limit import DEFAULT_LIMIT, limiter
from irrigation_advisor.api.v1.models.requests import (
    ComputeRecommendationRequest,
    SoilReadingRequest,
)
from irrigation_advisor.api.v1.models.responses import RecommendationResponse
from irrigation_advisor.config import settings
from irrigation_advisor.domain.exceptions import InvalidFeatureData
from irrigation_advisor.infrastructure.api_constants import APIConstants

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/recommendations",
    tags=["recommendations"],
)

COMMON_RESPONSES = {
    400: {"description": "Invalid image or inputs"},
    422: {"description": "Request validation error"},
    429: {"description": "Rate limit exceeded"},
    500: {"description": "Internal server error"},
}


@router.post(
    "/analyze",
    response_model=RecommendationResponse,
    summary="Analyze a soil/crop photo",
    description="""
    Upload a soil or crop photograph and receive a water recommendation.

    This endpoint:
    1. Decodes the image and extracts colour features
    2. Classifies soil moisture and crop health (external model when
       configured, falling back to colour rules on low confidence)
    3. Fetches current weather for the location (default weather on failure)
    4. Computes a bounded L/m² recommendation, urgency and next check time
    """,
    responses={
        **COMMON_RESPONSES,
        413: {"description": "Image too large"},
    },
)
@limiter.limit(DEFAULT_LIMIT)
async def analyze_image(
    request: Request,
    advisory_service: AdvisoryServiceDep,
    image: Annotated[UploadFile, File(description="JPEG or PNG photograph")],
    crop_type: Annotated[Optional[str], Form(description="Crop name, e.g. 'rice'")] = None,
    field_area_m2: Annotated[Optional[float], Form(gt=0, description="Field area in m²")] = None,
    location: Annotated[Optional[str], Form(description="City for the weather lookup")] = None,
) -> RecommendationResponse:
    """
    Analyze an uploaded image and return a recommendation.

    Args:
        request: Incoming request (used by the rate limiter)
        advisory_service: Advisory service (injected dependency)
        image: Uploaded photograph
        crop_type: Optional crop name
        field_area_m2: Optional field area
        location: Optional weather location

    Returns:
        RecommendationResponse

    Raises:
        HTTPException: If the upload is missing, unsupported or undecodable
    """
    content_type = (image.content_type or "").lower()
    if content_type not in APIConstants.ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Only JPEG and PNG images are supported")

    data = await image.read()
    if not data:
        raise HTTPException(status_code=400, detail="No image file provided")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image size must be less than {settings.max_upload_bytes // (1024 * 1024)}MB"
        )

    try:
        plan = await advisory_service.analyze_image(
            image_bytes=data,
            location=location or settings.default_location,
            crop_type=crop_type,
            field_area_m2=field_area_m2,
        )
    except InvalidFeatureData as e:
        raise HTTPException(status_code=400, detail=f"Invalid image: {str(e)}")

    return RecommendationResponse.from_plan(plan)


@router.post(
    "/compute",
    response_model=RecommendationResponse,
    summary="Compute a recommendation from pre-computed inputs",
    description="""
    Compute a recommendation from image features, an external classifier
    result or a reported soil reading, and an optional weather observation. No network calls are made;
    default weather (28 °C, 55 %, Clear) is used when none is supplied.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def compute_recommendation(
    request: Request,
    payload: ComputeRecommendationRequest,
    advisory_service: AdvisoryServiceDep,
) -> RecommendationResponse:
    """
    Compute a recommendation without image upload.

    Raises:
        HTTPException: If the inputs cannot be classified
    """
    try:
        plan = advisory_service.compute(
            features=payload.image_features,
            external_result=payload.classifier_result,
            soil_reading=payload.soil_reading,
            crop_type=payload.crop_type,
            field_area_m2=payload.field_area_m2,
            weather=payload.weather.to_snapshot() if payload.weather else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RecommendationResponse.from_plan(plan)


@router.post(
    "/reading",
    response_model=RecommendationResponse,
    summary="Recommend from a reported soil reading",
    description="""
    Compute a recommendation from a soil condition and moisture percentage
    reported from the field, skipping image analysis. Current weather is
    fetched for the location (default weather on failure).
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def recommend_from_reading(
    request: Request,
    payload: SoilReadingRequest,
    advisory_service: AdvisoryServiceDep,
) -> RecommendationResponse:
    """Recommend irrigation from a field reading with live weather."""
    plan = await advisory_service.recommend_from_reading(
        reading=payload.to_reading(),
        location=payload.location or settings.default_location,
        crop_type=payload.crop_type,
        field_area_m2=payload.field_area_m2,
    )
    return RecommendationResponse.from_plan(plan)
