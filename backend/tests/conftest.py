"""
Pytest Configuration & Shared Fixtures
"""
import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeFrameSource, FakePoseProvider, SWING_POSE, body_joints


@pytest.fixture
def swing_provider() -> FakePoseProvider:
    """Provider that always sees the side-on swing pose"""
    return FakePoseProvider(body=body_joints(SWING_POSE))


@pytest.fixture
def empty_provider() -> FakePoseProvider:
    """Provider that never finds anyone"""
    return FakePoseProvider()


@pytest.fixture
def ten_second_source() -> FakeFrameSource:
    """10 s video -> 300 frames, sampled every 10 frames"""
    return FakeFrameSource(duration_seconds=10.0)


# ========================================
# Application Fixtures
# ========================================

@pytest.fixture(scope="session")
def app():
    """FastAPI application instance"""
    from main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def client(app):
    """TestClient whose event loop stays up for background runs"""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
