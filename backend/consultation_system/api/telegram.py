from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..schemas import ApiResponse
from ..services.telegram import TelegramNotifier
from .deps import get_notifier

router = APIRouter()


@router.post("/test-telegram")
async def test_telegram(notifier: TelegramNotifier = Depends(get_notifier)):
    if await notifier.send_test():
        return ApiResponse(success=True, message="Тестовое сообщение отправлено в Telegram").to_json_dict()
    return JSONResponse(
        status_code=500,
        content=ApiResponse(success=False, error="Не удалось отправить тестовое сообщение").to_json_dict(),
    )
