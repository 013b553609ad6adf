"""API-specific test fixtures."""

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient

from app.api.routes import api_router
from app.core.auth import AuthUser, require_auth
from app.main import generic_exception_handler, http_exception_handler


def override_auth(user_id: str):
    """Create auth override for a specific platform user id."""

    async def _override():
        return AuthUser(user_id=user_id, claims={"sub": user_id})

    return _override


@pytest.fixture
def app(engine) -> FastAPI:
    """Test app with API routes and the global exception handlers.

    Depends on engine so the global session factory is set.
    """
    app = FastAPI()
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)
    app.include_router(api_router, prefix="/api")
    return app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def as_user(app):
    """Authenticate subsequent requests as the given profile."""

    def _as(profile):
        app.dependency_overrides[require_auth] = override_auth(str(profile.id))

    yield _as
    app.dependency_overrides.clear()
