"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Synthetic RGB images and encoded uploads
- Sample image features
- Sample weather snapshots
- Engine and mock weather client
- FastAPI test client
"""
import pytest
import cv2
import numpy as np
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from irrigation_advisor.main import app
from irrigation_advisor.domain.models import ImageFeatures, WeatherSnapshot
from irrigation_advisor.infrastructure.weather_client import WeatherClient
from irrigation_advisor.services.domain.engine_config import EngineConfig
from irrigation_advisor.services.domain.recommendation_engine import RecommendationEngine


# ============================================================
# Image Fixtures
# ============================================================

def solid_image(rgb: tuple[int, int, int], height: int = 20, width: int = 30) -> np.ndarray:
    """Create a single-colour RGB image."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = rgb
    return image


def encode_png(rgb_image: np.ndarray) -> bytes:
    """Encode an RGB array as PNG bytes."""
    ok, buffer = cv2.imencode(".png", cv2.cvtColor(rgb_image, cv2.COLOR_RGB2BGR))
    assert ok
    return buffer.tobytes()


@pytest.fixture
def green_image() -> np.ndarray:
    """Dense vegetation: H=60, S=255, V=200 on the OpenCV scale."""
    return solid_image((0, 200, 0))


@pytest.fixture
def brown_image() -> np.ndarray:
    """Bare dry soil: H=15, S=170, V=150 on the OpenCV scale."""
    return solid_image((150, 100, 50))


@pytest.fixture
def dark_image() -> np.ndarray:
    """Dark wet soil: V=20."""
    return solid_image((20, 20, 20))


@pytest.fixture
def brown_png(brown_image) -> bytes:
    return encode_png(brown_image)


# ============================================================
# Feature Fixtures
# ============================================================

@pytest.fixture
def dry_features() -> ImageFeatures:
    """Bright brown soil with sparse vegetation; rules give Dry, moisture 20."""
    return ImageFeatures(avg_brightness=120.0, green_pct=5.0, brown_pct=50.0, dark_soil_pct=10.0)


@pytest.fixture
def moist_features() -> ImageFeatures:
    """Partially dark soil with moderate crop; rules give Moist, moisture 45."""
    return ImageFeatures(avg_brightness=70.0, green_pct=35.0, brown_pct=20.0, dark_soil_pct=40.0)


# ============================================================
# Weather Fixtures
# ============================================================

@pytest.fixture
def hot_dry_weather() -> WeatherSnapshot:
    return WeatherSnapshot(temperature_c=38.0, humidity_pct=25, condition_text="Clear")


@pytest.fixture
def heavy_rain_weather() -> WeatherSnapshot:
    return WeatherSnapshot(
        temperature_c=38.0,
        humidity_pct=25,
        condition_text="Heavy Rain",
        precipitation_last_24h_mm=10.0,
    )


@pytest.fixture
def mild_weather() -> WeatherSnapshot:
    return WeatherSnapshot(temperature_c=25.0, humidity_pct=50, condition_text="Clear")


# ============================================================
# Engine Fixtures
# ============================================================

@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(engine_config) -> RecommendationEngine:
    return RecommendationEngine(engine_config)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_weather_client(hot_dry_weather):
    """Create a mock weather client returning hot, dry weather."""
    mock_client = AsyncMock(spec=WeatherClient)
    mock_client.api_key = "test-key"
    mock_client.get_current_weather.return_value = hot_dry_weather
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
