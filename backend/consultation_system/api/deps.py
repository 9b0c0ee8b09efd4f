from fastapi import Request

from ..services.consultations import ConsultationService
from ..services.telegram import TelegramNotifier


# Сервисы создаются один раз в lifespan и живут на app.state;
# в тестах подменяются через app.dependency_overrides.
def get_consultation_service(request: Request) -> ConsultationService:
    return request.app.state.consultation_service


def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier
