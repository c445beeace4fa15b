"""Integration test fixtures: app with fallback hashes, instant mock payments, async client."""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

_WORK_DIR = tempfile.mkdtemp(prefix="trojantrap-it-")

# Force test config BEFORE any app imports
os.environ["DEBUG"] = "true"
os.environ["HASH_FEED_PATH"] = os.path.join(_WORK_DIR, "missing-feed.csv")
os.environ["UPLOAD_DIR"] = os.path.join(_WORK_DIR, "uploads")
os.environ["LOG_DIR"] = os.path.join(_WORK_DIR, "logs")
os.environ["PAYMENT_PROVIDER"] = "mock"
os.environ["MOCK_PAYMENT_DELAY"] = "0"
os.environ["PREMIUM_SIZE_THRESHOLD"] = "2048"
os.environ["MAX_UPLOAD_BYTES"] = "8192"
os.environ["UPLOAD_CHUNK_SIZE"] = "1024"

import trojantrap.dependencies as dep_mod


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_app():
    """The FastAPI app with singletons rebuilt from the test environment."""
    dep_mod.reset_singletons()
    dep_mod.get_app_config()

    from trojantrap.main import app

    yield app

    app.dependency_overrides.clear()
    dep_mod.reset_singletons()


@pytest_asyncio.fixture(loop_scope="session")
async def client(test_app):
    """Async HTTP client for testing."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def upload_dir():
    return os.environ["UPLOAD_DIR"]
