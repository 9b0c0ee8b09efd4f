from __future__ import annotations

import asyncio
import json
from datetime import date, datetime
from pathlib import Path

import aiofiles
import aiofiles.os
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from ..schemas import ConsultationRequest

_records_adapter = TypeAdapter(list[ConsultationRequest])


class StorageError(Exception):
    pass


class CorruptDayFileError(ValueError):
    pass


class ConsultationStore:
    """
    Заявки хранятся по дням: data_dir/consultations_YYYY-MM-DD.json, внутри JSON-массив
    в порядке поступления. Запись = read-modify-write всего файла.

    asyncio.Lock сериализует запись внутри процесса. Несколько процессов/инстансов
    на один data_dir не поддерживаются: возможна потеря обновлений.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self._lock = asyncio.Lock()

    def path_for(self, day: date) -> Path:
        return self.data_dir / f"consultations_{day.isoformat()}.json"

    @staticmethod
    def day_of(record: ConsultationRequest) -> date:
        # дата по локальному времени сервера
        created_at = record.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone()
        return created_at.date()

    async def _load(self, path: Path) -> list[ConsultationRequest]:
        """Читает файл дня. FileNotFoundError / OSError / CorruptDayFileError пробрасываются."""
        async with aiofiles.open(path, "rb") as f:
            content = await f.read()
        # битый JSON и не-UTF-8 байты pydantic тоже отдаёт как ValidationError
        try:
            return _records_adapter.validate_json(content)
        except ValidationError as e:
            raise CorruptDayFileError(f"{path.name}: {e.error_count()} validation error(s)") from e

    async def read_by_date(self, day: date) -> list[ConsultationRequest]:
        path = self.path_for(day)
        try:
            return await self._load(path)
        except FileNotFoundError:
            logger.debug("No consultations file for {}", day.isoformat())
            return []
        except CorruptDayFileError as e:
            logger.error("Consultations file is corrupt, returning no records: {}", e)
            return []
        except OSError as e:
            logger.error("Cannot read consultations file {}: {}", path, e)
            return []

    async def _quarantine(self, path: Path) -> None:
        stamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        target = path.with_name(f"{path.name}.corrupt-{stamp}")
        await aiofiles.os.replace(path, target)
        logger.error("Corrupt consultations file moved aside to {}", target)

    async def _write(self, path: Path, records: list[ConsultationRequest]) -> None:
        payload = json.dumps([r.to_json_dict() for r in records], ensure_ascii=False, indent=2)
        tmp_path = path.with_name(path.name + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(payload)
        await aiofiles.os.replace(tmp_path, path)

    async def append(self, record: ConsultationRequest) -> None:
        path = self.path_for(self.day_of(record))
        async with self._lock:
            try:
                await aiofiles.os.makedirs(self.data_dir, exist_ok=True)

                try:
                    records = await self._load(path)
                except FileNotFoundError:
                    records = []
                except CorruptDayFileError as e:
                    logger.error("Consultations file is corrupt: {}", e)
                    await self._quarantine(path)
                    records = []

                records.append(record)
                await self._write(path, records)
            except OSError as e:
                logger.error("Error saving consultation request {}: {}", record.id, e)
                raise StorageError(f"Cannot save consultation request {record.id}") from e

        logger.info("Consultation request saved: {} -> {}", record.id, path.name)
