from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .api import consultations, telegram
from .config import ConfigError, allowed_origins, configure_logging, load_env_file, load_settings
from .schemas import ApiResponse
from .services.consultations import ConsultationService
from .services.store import ConsultationStore
from .services.telegram import TelegramNotifier

SERVICE_NAME = "consultation-system"
INTERNAL_ERROR = "Внутренняя ошибка сервера"

load_env_file()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error("{}. Set TELEGRAM_BOT_TOKEN and TELEGRAM_ADMIN_CHAT_ID in the environment or .env", e)
        raise
    configure_logging(settings.log_level)

    notifier = TelegramNotifier(settings.telegram)
    store = ConsultationStore(settings.data_dir)
    app.state.notifier = notifier
    app.state.consultation_service = ConsultationService(store, notifier)
    logger.info("Consultation System started, data dir: {}", settings.data_dir)
    try:
        yield
    finally:
        await notifier.aclose()


app = FastAPI(title="Consultation System", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("{} {}", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed body on {}: {}", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content=ApiResponse(success=False, error="Некорректные данные формы").to_json_dict(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ApiResponse(success=False, error=INTERNAL_ERROR).to_json_dict())


app.include_router(consultations.router, prefix="/api/consultation", tags=["consultations"])
app.include_router(telegram.router, prefix="/api", tags=["telegram"])


@app.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }


def run() -> None:
    import uvicorn

    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging()
        logger.error("{}. Set TELEGRAM_BOT_TOKEN and TELEGRAM_ADMIN_CHAT_ID in the environment or .env", e)
        raise SystemExit(1)

    configure_logging(settings.log_level)
    logger.info("Consultation System Server starting on port {}", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
