from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from ..schemas import ApiResponse, ConsultationFormData
from ..services.consultations import ConsultationService
from .deps import get_consultation_service

router = APIRouter()


@router.post("")
async def create_consultation(
    form: ConsultationFormData,
    service: ConsultationService = Depends(get_consultation_service),
):
    logger.info("Received consultation request from: {}", form.email)
    result = await service.process(form)
    if result.response.success:
        logger.info("Consultation request processed successfully: {}", result.response.data.id)
    else:
        logger.info("Consultation request failed: {}", result.response.error)
    return JSONResponse(status_code=result.status_code, content=result.response.to_json_dict())


@router.get("/stats")
async def consultation_stats(service: ConsultationService = Depends(get_consultation_service)):
    stats = await service.get_stats()
    return ApiResponse(success=True, data=stats).to_json_dict()


@router.get("/by-date/{day}")
async def consultations_by_date(day: str, service: ConsultationService = Depends(get_consultation_service)):
    # строгий YYYY-MM-DD: параметр попадает в имя файла
    try:
        parsed = date.fromisoformat(day)
    except ValueError:
        parsed = None
    if parsed is None or parsed.isoformat() != day:
        return JSONResponse(
            status_code=400,
            content=ApiResponse(success=False, error="Некорректная дата, ожидается формат YYYY-MM-DD").to_json_dict(),
        )

    consultations = await service.get_by_date(parsed)
    return ApiResponse(success=True, data=consultations).to_json_dict()
