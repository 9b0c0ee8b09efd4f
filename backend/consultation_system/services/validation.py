from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..schemas import ConsultationFormData

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Простая проверка российских номеров: +7/7/8, код 4xx/8xx/9xx, 7 цифр
PHONE_RE = re.compile(r"^(\+7|7|8)?[\s\-]?\(?[489][0-9]{2}\)?[\s\-]?[0-9]{3}[\s\-]?[0-9]{2}[\s\-]?[0-9]{2}$")

MIN_NAME_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 10


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return "; ".join(self.errors)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(email))


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.fullmatch(re.sub(r"\s", "", phone)))


def validate_form(form: ConsultationFormData) -> ValidationResult:
    # все правила проверяются независимо, ошибки накапливаются
    errors: list[str] = []

    if not form.name or len(form.name.strip()) < MIN_NAME_LENGTH:
        errors.append(f"Имя должно содержать минимум {MIN_NAME_LENGTH} символа")

    if not form.email or not is_valid_email(form.email):
        errors.append("Некорректный email адрес")

    if not form.project_description or len(form.project_description.strip()) < MIN_DESCRIPTION_LENGTH:
        errors.append(f"Описание проекта должно содержать минимум {MIN_DESCRIPTION_LENGTH} символов")

    if not form.service_type or not form.service_type.strip():
        errors.append("Необходимо выбрать тип услуги")

    if form.phone and not is_valid_phone(form.phone):
        errors.append("Некорректный номер телефона")

    return ValidationResult(accepted=not errors, errors=errors)
