"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from irrigation_advisor.config import settings
from irrigation_advisor.api.rate_limit import limiter
from irrigation_advisor.middleware.error_handler import ErrorHandlerMiddleware
from irrigation_advisor.api.v1.routers import recommendations, weather

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Water bounds: [{settings.min_liters_per_m2}, {settings.max_liters_per_m2}] L/m², "
                f"model confidence threshold={settings.external_confidence_threshold}")
    if not settings.weather_api_key:
        logger.warning("WEATHER_API_KEY is not set; recommendations will use default weather")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from irrigation_advisor.infrastructure.weather_client import get_weather_client
    logger.info("Shutting down application...")
    client = get_weather_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Irrigation Advisory API

    Turns a soil/crop photograph and live weather into a quantified water
    recommendation.

    ## Features

    - **Image Analysis**: Brightness and vegetation/soil colour coverage from
      the photo, classified into soil moisture and crop health
    - **Model Fallback**: External soil classifier results below 60% confidence
      are replaced by the colour rules
    - **Weather Adjustment**: Evapotranspiration, heat, dry air and rain factors
    - **Bounded Recommendation**: L/m² within configured bounds, field totals,
      urgency and next check time
    - **Rate Limiting**: Protects the API from abuse

    ## Calculation

    1. Base water falls linearly with soil moisture between the bounds
    2. Multiplied by soil retention, crop coefficient (Kc), evapotranspiration
       and weather factors
    3. Reduced by the rain adjustment fraction (at most 90%)
    4. Clamped to bounds and rounded to 0.1 L/m²
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(recommendations.router, prefix="/api/v1")
app.include_router(weather.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
