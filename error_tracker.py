import asyncio
import logging
from typing import List
from reference_store import ReferenceStore, EMPLOYEES, ERROR_CATEGORIES, ERROR_TYPES, ERROR_LOGS
from denormalizer import Denormalizer
from cascade_delete import CascadeDeleteCoordinator
from schemas.error_log import PopulatedErrorLog
from schemas.error_type import ErrorTypeRead
from utils.exceptions import ReferenceNotFound

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("name must not be empty")
    return name


class ErrorTracker:
    """Operations used by the admin and report screens."""

    def __init__(self, store: ReferenceStore):
        self.store = store
        self.denormalizer = Denormalizer(store)
        self.cascade = CascadeDeleteCoordinator(store)

    # --- 직원 ---
    async def list_employees(self):
        return await self.store.list_all(EMPLOYEES)

    async def add_employee(self, name: str) -> str:
        return await self.store.insert(EMPLOYEES, {"name": _clean_name(name)})

    async def delete_employee(self, id: str) -> int:
        return await self.cascade.delete_employee(id)

    # --- 카테고리 ---
    async def list_categories(self):
        return await self.store.list_all(ERROR_CATEGORIES)

    async def add_category(self, name: str) -> str:
        return await self.store.insert(ERROR_CATEGORIES, {"name": _clean_name(name)})

    async def update_category_name(self, id: str, name: str) -> None:
        await self.store.update_field(ERROR_CATEGORIES, id, {"name": _clean_name(name)})

    async def delete_category(self, id: str) -> int:
        return await self.cascade.delete_error_category(id)

    # --- 오류 유형 ---
    async def list_error_types(self) -> List[ErrorTypeRead]:
        return await self.denormalizer.get_error_types()

    async def add_error_type(self, name: str, category_id: str) -> str:
        name = _clean_name(name)
        category_ref = self.store.ref(ERROR_CATEGORIES, category_id)
        if await self.store.resolve_ref(category_ref) is None:
            raise ReferenceNotFound(ERROR_CATEGORIES, category_id)
        return await self.store.insert(ERROR_TYPES, {"name": name, "category_ref": category_ref.id})

    async def delete_error_type(self, id: str) -> int:
        return await self.cascade.delete_error_type(id)

    # --- 오류 로그 ---
    async def get_filtered_error_logs(self, month: int, year: int) -> List[PopulatedErrorLog]:
        return await self.denormalizer.get_filtered_error_logs(month, year)

    async def add_error_log(self, employee_id: str, type_id: str) -> str:
        employee_ref = self.store.ref(EMPLOYEES, employee_id)
        type_ref = self.store.ref(ERROR_TYPES, type_id)
        employee, error_type = await asyncio.gather(
            self.store.resolve_ref(employee_ref),
            self.store.resolve_ref(type_ref),
        )
        if employee is None:
            raise ReferenceNotFound(EMPLOYEES, employee_id)
        if error_type is None:
            raise ReferenceNotFound(ERROR_TYPES, type_id)
        log_id = await self.store.insert(ERROR_LOGS, {
            "employee_ref": employee_ref.id,
            "type_ref": type_ref.id,
        })
        logger.debug("logged error %s for employee %s (type %s)", log_id, employee_id, type_id)
        return log_id

    async def delete_error_log(self, id: str) -> None:
        await self.store.delete_one(ERROR_LOGS, id)
