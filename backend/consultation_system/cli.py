import asyncio

from .config import ConfigError, TelegramConfig, configure_logging, load_env_file, load_telegram_config
from .services.telegram import TelegramNotifier


async def _send_test(config: TelegramConfig) -> bool:
    notifier = TelegramNotifier(config)
    try:
        return await notifier.send_test()
    finally:
        await notifier.aclose()


def main() -> int:
    """Проверка связи с Telegram: отправляет тестовое сообщение администратору."""
    load_env_file()
    configure_logging("WARNING")
    print("🧪 Тестирование подключения к Telegram...")

    try:
        config = load_telegram_config()
    except ConfigError as e:
        print(f"❌ {e}")
        raise SystemExit(1)

    print("📋 Конфигурация:")
    print(f"Bot Token: {config.bot_token[:10]}...")
    print(f"Admin Chat ID: {config.admin_chat_id}")

    print("📤 Отправка тестового сообщения...")
    if asyncio.run(_send_test(config)):
        print("✅ Тестовое сообщение успешно отправлено!")
        return 0

    print("❌ Не удалось отправить тестовое сообщение")
    print("🔍 Проверьте:")
    print("  - Правильность токена бота")
    print("  - ID чата администратора")
    print("  - Что бот добавлен в чат или начата переписка с ботом")
    raise SystemExit(1)


if __name__ == "__main__":
    main()
