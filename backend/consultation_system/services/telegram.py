from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
from loguru import logger

from ..config import TelegramConfig
from ..schemas import ConsultationRequest

TEST_MESSAGE = "🧪 <b>Тестовое сообщение</b>\n\nСистема уведомлений о заявках работает корректно!"

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(text: str) -> str:
    # & заменяется первым, иначе испортятся уже подставленные сущности
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


class TelegramNotifier:
    """
    Уведомления администратору о новых заявках через Telegram Bot API.
    Наружу ошибки не выбрасываются: любой сбой доставки логируется и превращается в False.
    """

    def __init__(self, config: TelegramConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def send_message_url(self) -> str:
        return f"{self.config.api_base}/bot{self.config.bot_token}/sendMessage"

    def _format_timestamp(self, created_at: datetime) -> str:
        tz = ZoneInfo(self.config.timezone)
        if created_at.tzinfo is None:
            created_at = created_at.astimezone()
        return created_at.astimezone(tz).strftime("%d.%m.%Y, %H:%M")

    def format_consultation_message(self, request: ConsultationRequest) -> str:
        lines: list[str] = [
            "🚀 <b>Новая заявка на консультацию!</b>",
            "",
            f"📅 <b>Дата:</b> {self._format_timestamp(request.created_at)}",
            f"👤 <b>Имя:</b> {escape_html(request.name)}",
            f"📧 <b>Email:</b> {escape_html(request.email)}",
        ]
        if request.phone:
            lines.append(f"📞 <b>Телефон:</b> {escape_html(request.phone)}")
        if request.company:
            lines.append(f"🏢 <b>Компания:</b> {escape_html(request.company)}")
        lines.append(f"🎯 <b>Услуга:</b> {escape_html(request.service_type)}")
        if request.budget:
            lines.append(f"💰 <b>Бюджет:</b> {escape_html(request.budget)}")
        if request.timeline:
            lines.append(f"⏰ <b>Сроки:</b> {escape_html(request.timeline)}")
        lines.append(f"📝 <b>Описание проекта:</b>\n{escape_html(request.project_description)}")
        if request.additional_info:
            lines.append(f"\n💬 <b>Дополнительная информация:</b>\n{escape_html(request.additional_info)}")
        lines.append("\n#новая_заявка #консультация")
        return "\n".join(lines)

    async def notify(self, request: ConsultationRequest) -> bool:
        try:
            text = self.format_consultation_message(request)
        except Exception:
            logger.exception("Failed to format Telegram notification for {}", request.id)
            return False
        return await self.send_message(text)

    async def send_test(self) -> bool:
        return await self.send_message(TEST_MESSAGE)

    async def send_message(self, text: str) -> bool:
        payload = {
            "chat_id": self.config.admin_chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            r = await self._client.post(self.send_message_url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Error sending message to Telegram: {}: {}", type(e).__name__, e)
            return False
        except Exception:
            logger.exception("Unexpected error sending message to Telegram")
            return False

        if not r.is_success:
            logger.error("Telegram API error: {} {}", r.status_code, r.text)
            return False

        try:
            data = r.json()
        except ValueError:
            logger.error("Telegram API returned non-JSON body: {}", r.text)
            return False
        # 2xx с ok: false тоже считается недоставкой
        if not isinstance(data, dict) or not data.get("ok", False):
            logger.error("Telegram API rejected message: {}", data)
            return False

        result = data.get("result")
        message_id = result.get("message_id") if isinstance(result, dict) else None
        logger.info("Telegram message sent successfully: {}", message_id)
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
