import json

import httpx
import pytest

from consultation_system.api.deps import get_consultation_service, get_notifier
from consultation_system.config import TelegramConfig
from consultation_system.main import app
from consultation_system.schemas import ConsultationFormData
from consultation_system.services.consultations import ConsultationService
from consultation_system.services.store import ConsultationStore
from consultation_system.services.telegram import TelegramNotifier

BOT_TOKEN = "123456:TEST-TOKEN"
ADMIN_CHAT_ID = "-100500"


class TelegramStub:
    """Подставной Telegram Bot API поверх httpx.MockTransport, запоминает все запросы."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.fail_transport = False
        self.body: object | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_transport:
            raise httpx.ConnectError("connection refused", request=request)
        if self.body is not None:
            return httpx.Response(self.status_code, json=self.body)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"ok": False, "description": "Bad Request: chat not found"})
        return httpx.Response(200, json={"ok": True, "result": {"message_id": len(self.requests)}})

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def telegram_stub():
    return TelegramStub()


@pytest.fixture
def telegram_config():
    return TelegramConfig(bot_token=BOT_TOKEN, admin_chat_id=ADMIN_CHAT_ID)


@pytest.fixture
def notifier(telegram_config, telegram_stub):
    client = httpx.AsyncClient(transport=httpx.MockTransport(telegram_stub.handler))
    return TelegramNotifier(telegram_config, client=client)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return ConsultationStore(data_dir)


@pytest.fixture
def service(store, notifier):
    return ConsultationService(store, notifier)


@pytest.fixture
def valid_form():
    return ConsultationFormData(
        name="Ann Lee",
        email="ann@example.com",
        project_description="Need a consulting engagement for migration",
        service_type="advisory",
    )


@pytest.fixture
def app_overrides(service, notifier):
    app.dependency_overrides[get_consultation_service] = lambda: service
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield app
    app.dependency_overrides.clear()
