from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # JSON (API и файлы) в camelCase, атрибуты в snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConsultationStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ConsultationFormData(CamelModel):
    """
    Данные формы как пришли от клиента.
    Все поля необязательны на уровне парсинга: обязательность проверяет валидатор,
    чтобы клиент получил понятные сообщения, а не 422 от фреймворка.
    """

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    project_description: str | None = None
    service_type: str | None = None
    budget: str | None = None
    timeline: str | None = None
    additional_info: str | None = None


class ConsultationRequest(CamelModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    company: str | None = None
    project_description: str
    service_type: str
    budget: str | None = None
    timeline: str | None = None
    additional_info: str | None = None
    created_at: datetime
    status: ConsultationStatus = ConsultationStatus.NEW


class ConsultationStats(CamelModel):
    total: int = 0
    today: int = 0
    this_week: int = 0
    this_month: int = 0


class ApiResponse(CamelModel):
    success: bool
    data: ConsultationRequest | list[ConsultationRequest] | ConsultationStats | None = None
    error: str | None = None
    message: str | None = None
