"""
Pytest configuration and shared fixtures.

This file registers custom pytest markers and command-line options, and
wires the API to fresh in-memory stores for every test.
"""

import pytest
from fastapi.testclient import TestClient
from recost.api.deps import get_capture_session, get_document_store, get_kv_store
from recost.api.main import app
from recost.core.config import settings
from recost.services.storage import InMemoryKeyValueStore, LocalDocumentStore
from recost.services.workflow import CaptureSession


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini API"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real Gemini API key"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def fast_mock_settings():
    """No simulated latency and mock extraction unless a test opts in"""
    original_scale = settings.mock_latency_scale
    original_key = settings.gemini_api_key
    settings.mock_latency_scale = 0
    settings.gemini_api_key = None
    yield
    settings.mock_latency_scale = original_scale
    settings.gemini_api_key = original_key


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return LocalDocumentStore(kv, latency_scale=0)


@pytest.fixture
def session(store):
    return CaptureSession(store, default_currency="PLN")


@pytest.fixture
def client(kv, store, session):
    """TestClient bound to this test's stores and capture session"""
    app.dependency_overrides[get_kv_store] = lambda: kv
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_capture_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    r = client.post("/auth/login", json={"email": "admin@recost.ai"})
    assert r.status_code == 200
    return client
