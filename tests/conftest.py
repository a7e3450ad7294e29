from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from dike.core.config import settings

# Override settings for tests
settings.openrouter_api_key = "test-openrouter-key"
settings.app_env = "development"

from dike.core.rate_limit import limiter  # noqa: E402
from dike.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with a fresh per-IP rate-limit window."""
    limiter.reset()
    yield


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def analysis_payload() -> dict:
    """A parsed (barriers-shape) analysis as the frontend sends it back."""
    return {
        "overallScore": 70,
        "summary": "Solid assignment with a cost barrier.",
        "barriers": [
            {
                "category": "Socioeconomic",
                "severity": "High",
                "issue": "Requires a $60 textbook",
                "impact": "Low-income students may not afford it",
                "suggestions": ["Offer an open-access reading", "Put copies on library reserve"],
                "researchBasis": "textbook costs student outcomes",
            }
        ],
        "strengths": ["Clear rubric"],
        "recommendations": ["Provide free materials", "Allow flexible deadlines"],
        "reformattedAssignment": "Read the open-access chapter & write 2 pages.",
        "shape": "barriers",
    }
