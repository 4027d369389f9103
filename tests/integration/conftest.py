"""Integration-test fixtures.

The API runs against an engine backed by the in-memory ledger and a manual
clock, injected through FastAPI dependency overrides.
"""

import pytest
from httpx import AsyncClient

from src.main import app
from src.sm_gateway.auth.jwt_handler import create_access_token
from src.sm_market.application.service import get_market_engine


@pytest.fixture
async def api(client: AsyncClient, engine):
    """Client wired to the test engine."""
    app.dependency_overrides[get_market_engine] = lambda: engine
    yield client
    app.dependency_overrides.pop(get_market_engine, None)


@pytest.fixture
def auth():
    """Build an Authorization header for a wallet address."""

    def _auth(address: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(address)}"}

    return _auth
