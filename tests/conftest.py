import pytest

from greeting_service.app import create_app
from greeting_service.config import Settings


@pytest.fixture
def make_client():
    def _make(env=None):
        app = create_app(Settings.from_env(env or {}))
        app.testing = True
        return app.test_client()
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
