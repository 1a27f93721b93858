import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from reference_store import ReferenceStore, DocumentRef, ERROR_LOGS, ERROR_TYPES
from schemas.error_log import PopulatedErrorLog
from schemas.error_type import ErrorTypeRead

logger = logging.getLogger(__name__)

DELETED_CATEGORY_LABEL = "Deleted category"
NO_CATEGORY_LABEL = "—"


def month_window(month: int, year: int) -> Tuple[datetime, datetime]:
    """Half-open ``[start, end)`` covering one calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


class RefCache:
    """Resolves each distinct reference once per pass; concurrent callers share the lookup."""

    def __init__(self, store: ReferenceStore):
        self.store = store
        self._tasks: Dict[DocumentRef, asyncio.Task] = {}

    async def resolve(self, ref: Optional[DocumentRef]):
        if ref is None:
            return None
        task = self._tasks.get(ref)
        if task is None:
            task = asyncio.ensure_future(self.store.resolve_ref(ref))
            self._tasks[ref] = task
        return await task

    def cancel_pending(self) -> None:
        for task in self._tasks.values():
            if not task.done():
                task.cancel()


class Denormalizer:
    def __init__(self, store: ReferenceStore):
        self.store = store

    async def get_filtered_error_logs(self, month: int, year: int) -> List[PopulatedErrorLog]:
        """Report rows for every log in the month whose employee/type/category chain resolves.

        Logs with a broken chain are dropped, not reported as errors. Row order
        is unspecified.
        """
        start, end = month_window(month, year)
        logs = await self.store.query_by_date_range(ERROR_LOGS, start, end)
        cache = RefCache(self.store)
        try:
            rows = await asyncio.gather(*(self._populate(log, cache) for log in logs))
        except BaseException:
            cache.cancel_pending()
            raise
        populated = [row for row in rows if row is not None]
        if len(populated) != len(logs):
            logger.debug("dropped %d of %d logs with dangling references (%04d-%02d)",
                         len(logs) - len(populated), len(logs), year, month)
        return populated

    async def _populate(self, log, cache: RefCache) -> Optional[PopulatedErrorLog]:
        employee, error_type = await asyncio.gather(
            cache.resolve(self.store.ref_of(log, "employee_ref")),
            cache.resolve(self.store.ref_of(log, "type_ref")),
        )
        if employee is None or error_type is None:
            return None
        category = await cache.resolve(self.store.ref_of(error_type, "category_ref"))
        if category is None:
            return None
        return PopulatedErrorLog(
            id=log.id,
            created_at=log.created_at,
            employee_id=employee.id,
            employee_name=employee.name,
            error_type_name=error_type.name,
            error_category_name=category.name,
            category_id=category.id,
        )

    async def get_error_types(self) -> List[ErrorTypeRead]:
        """Every error type with its category name.

        Unlike log rows, a type whose category is gone is kept and labelled
        ``DELETED_CATEGORY_LABEL``.
        """
        types = await self.store.list_all(ERROR_TYPES)
        cache = RefCache(self.store)

        async def label(error_type) -> ErrorTypeRead:
            ref = self.store.ref_of(error_type, "category_ref")
            if ref is None:
                category_name = NO_CATEGORY_LABEL
            else:
                category = await cache.resolve(ref)
                category_name = category.name if category is not None and category.name else DELETED_CATEGORY_LABEL
            return ErrorTypeRead(
                id=error_type.id,
                name=error_type.name,
                category_ref=error_type.category_ref,
                category_name=category_name,
            )

        try:
            return list(await asyncio.gather(*(label(t) for t in types)))
        except BaseException:
            cache.cancel_pending()
            raise
