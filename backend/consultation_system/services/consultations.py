from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from datetime import date, datetime

from loguru import logger

from ..schemas import ApiResponse, ConsultationFormData, ConsultationRequest, ConsultationStats, ConsultationStatus
from .store import ConsultationStore
from .telegram import TelegramNotifier
from .validation import validate_form

SUCCESS_MESSAGE = "Заявка успешно отправлена! Мы свяжемся с вами в ближайшее время."
PROCESSING_ERROR = "Произошла ошибка при обработке заявки. Попробуйте позже."

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, rem = divmod(n, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_id() -> str:
    # время + случайный суффикс; проверки на коллизии нет
    timestamp = _to_base36(time.time_ns() // 1_000_000)
    random_part = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"cons_{timestamp}_{random_part}"


@dataclass(frozen=True)
class ProcessResult:
    """
    Два независимых канала результата: response/status_code зависят только от
    валидации и сохранения, notified лишь фиксирует исход уведомления.
    """

    response: ApiResponse
    status_code: int
    notified: bool | None = None


class ConsultationService:
    def __init__(self, store: ConsultationStore, notifier: TelegramNotifier):
        self.store = store
        self.notifier = notifier

    def build_request(self, form: ConsultationFormData) -> ConsultationRequest:
        return ConsultationRequest(
            id=generate_id(),
            name=form.name or "",
            email=form.email or "",
            phone=form.phone,
            company=form.company,
            project_description=form.project_description or "",
            service_type=form.service_type or "",
            budget=form.budget,
            timeline=form.timeline,
            additional_info=form.additional_info,
            created_at=datetime.now().astimezone(),
            status=ConsultationStatus.NEW,
        )

    async def process(self, form: ConsultationFormData) -> ProcessResult:
        # 1) валидация, без побочных эффектов
        validation = validate_form(form)
        if not validation.accepted:
            return ProcessResult(ApiResponse(success=False, error=validation.message), 400)

        # 2) сохранение
        request = self.build_request(form)
        try:
            await self.store.append(request)
        except Exception:
            logger.exception("Error processing consultation request from {}", request.email)
            return ProcessResult(ApiResponse(success=False, error=PROCESSING_ERROR), 500)

        # 3) уведомление: на ответ клиенту не влияет
        notified = await self.notifier.notify(request)
        if not notified:
            logger.warning("Failed to send Telegram notification, but request {} was saved", request.id)

        return ProcessResult(
            ApiResponse(success=True, data=request, message=SUCCESS_MESSAGE),
            200,
            notified=notified,
        )

    async def get_by_date(self, day: date) -> list[ConsultationRequest]:
        return await self.store.read_by_date(day)

    async def get_stats(self, today: date | None = None) -> ConsultationStats:
        today = today or date.today()
        count = len(await self.store.read_by_date(today))
        # неделя/месяц/всего пока считаются только по сегодняшнему файлу
        return ConsultationStats(total=count, today=count, this_week=count, this_month=count)
