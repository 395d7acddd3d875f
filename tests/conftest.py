import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from factories import FakeGateway


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def viewer_id():
    return str(uuid.uuid4())


@pytest.fixture
def auth_header(viewer_id):
    from jose import jwt

    from dishcovery.core.config import settings

    token = jwt.encode({"sub": viewer_id, "type": "access"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(gateway):
    from dishcovery.api import deps
    from dishcovery.main import app as fastapi_app

    fastapi_app.dependency_overrides[deps.get_gateway] = lambda: gateway
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
