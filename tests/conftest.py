import itertools
import os

# Логи тестов только в консоль
os.environ.setdefault("HELPDESK_LOG_TO_FILE", "false")

import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from helpdesk.backend.app import create_app
from helpdesk.backend.core.settings import Settings
from helpdesk.frontend.backend_client import BackendClient
from helpdesk.shared.schemas import TelegramUserProfile, generate_id

BOT_TOKEN = "123456789:TEST-bot-token"

_telegram_ids = itertools.count(500000)


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        DATABASE_URL="sqlite://",
        EXPOSE_INTERNAL_ROUTES=True,
        TELEGRAM_BOT_TOKEN=BOT_TOKEN,
        SESSION_SECRET="test-secret",
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def make_client(app):
    clients = []

    def factory() -> BackendClient:
        http = TestClient(app)
        client = BackendClient(base_url="http://testserver", api_prefix="/api", http=http)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def make_user(make_client):
    """Создать пользователя через внутренние маршруты и вернуть (клиент с его сессией, id)."""

    def factory(first_name="Test", last_name="User", username=None, telegram_id=None):
        client = make_client()
        user_id = generate_id()
        profile = TelegramUserProfile(
            id=telegram_id if telegram_id is not None else next(_telegram_ids),
            first_name=first_name,
            last_name=last_name,
            username=username,
        )
        client.internal_create_user(user_id, profile).unwrap()
        client.internal_fake_login(user_id).unwrap()
        return client, user_id

    return factory
