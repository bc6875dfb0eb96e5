"""Test fixtures for the pay link services."""

import os
import tempfile
from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'paylink-test.db')}")
os.environ.setdefault("SERVICE_NAME", "paylink-test")
os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = ""

from paylink.common.db import Base, engine
from paylink.services.checkout import models  # noqa: F401
from paylink.services.checkout.main import app as checkout_app
from paylink.services.web.main import app as web_app


@pytest.fixture()
def reset_database() -> Iterator[None]:
    """Drop and recreate the schema for an isolated test."""

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield


@pytest_asyncio.fixture()
async def checkout_client(reset_database: None) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=checkout_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    checkout_app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def web_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=web_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    web_app.dependency_overrides.clear()
