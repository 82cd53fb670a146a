import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from tests.helpers import BOT_TOKEN, FakePricing


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch):
    """Known bot token, open allow-list and mock customers unless a test says otherwise."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", BOT_TOKEN)
    monkeypatch.delenv("ALLOWED_OPERATOR_IDS", raising=False)
    monkeypatch.delenv("CUSTOMER_API_KEY", raising=False)


@pytest.fixture
def settings_factory(tmp_path):
    def make(allowed=frozenset(), **kw):
        return Settings(
            bot_token=BOT_TOKEN,
            allowed_operator_ids=frozenset(allowed),
            database_url=f"sqlite:///{tmp_path / 'test.db'}",
            **kw,
        )
    return make


@pytest.fixture
def client_factory(settings_factory):
    def make(allowed=frozenset(), pricing=None):
        app = create_app(settings_factory(allowed))
        app.state.pricing = pricing or FakePricing()
        return TestClient(app)
    return make
