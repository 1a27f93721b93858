import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.future import select
from models import Employee, ErrorCategory, ErrorType, ErrorLog
from utils.exceptions import StoreUnavailable, BatchCommitFailed, ReferenceNotFound

logger = logging.getLogger(__name__)

EMPLOYEES = "employees"
ERROR_CATEGORIES = "error_categories"
ERROR_TYPES = "error_types"
ERROR_LOGS = "error_logs"

COLLECTIONS = {
    EMPLOYEES: Employee,
    ERROR_CATEGORIES: ErrorCategory,
    ERROR_TYPES: ErrorType,
    ERROR_LOGS: ErrorLog,
}

# (컬렉션, 약한 참조 컬럼) -> 대상 컬렉션
REFERENCE_FIELDS = {
    (ERROR_TYPES, "category_ref"): ERROR_CATEGORIES,
    (ERROR_LOGS, "employee_ref"): EMPLOYEES,
    (ERROR_LOGS, "type_ref"): ERROR_TYPES,
}

IMMUTABLE_FIELDS = ("id", "created_at")

STORE_ERRORS = (SQLAlchemyError, OSError)


def model_for(collection: str):
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}")


@dataclass(frozen=True)
class DocumentRef:
    """Weak reference to a record: collection name plus id, no ownership."""
    collection: str
    id: str

    def __post_init__(self):
        model_for(self.collection)

    @property
    def model(self):
        return COLLECTIONS[self.collection]

    def __str__(self):
        return f"{self.collection}/{self.id}"


@dataclass
class BatchOperation:
    kind: str  # 'delete' | 'update'
    ref: DocumentRef
    fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in ("delete", "update"):
            raise ValueError(f"Unsupported batch operation: {self.kind}")
        if self.kind == "update":
            _check_mutable(self.fields)

    @classmethod
    def delete(cls, ref: DocumentRef) -> "BatchOperation":
        return cls("delete", ref)

    @classmethod
    def update(cls, ref: DocumentRef, fields: Dict[str, Any]) -> "BatchOperation":
        return cls("update", ref, dict(fields))


def _check_mutable(fields: Dict[str, Any]) -> None:
    frozen = [f for f in IMMUTABLE_FIELDS if f in fields]
    if frozen:
        raise ValueError(f"Immutable field(s) cannot be updated: {', '.join(frozen)}")


@contextmanager
def _store_errors(operation: str, error_cls=StoreUnavailable):
    try:
        yield
    except STORE_ERRORS as e:
        raise error_cls(f"{operation} failed: {e}") from e


class ReferenceStore:
    """CRUD, range and reference queries over the four tracker collections.

    Every call opens its own short-lived session, so independent calls may be
    awaited concurrently (e.g. under ``asyncio.gather``).
    """

    def __init__(self, sessionmaker: async_sessionmaker):
        self.sessionmaker = sessionmaker

    def ref(self, collection: str, id: str) -> DocumentRef:
        return DocumentRef(collection, id)

    def ref_of(self, record, field_name: str) -> Optional[DocumentRef]:
        """Weak reference held in ``record.<field_name>``, or None when unset."""
        target = REFERENCE_FIELDS.get((record.__tablename__, field_name))
        if target is None:
            raise ValueError(f"{record.__tablename__}.{field_name} is not a reference field")
        value = getattr(record, field_name)
        if not value:
            return None
        return DocumentRef(target, value)

    async def list_all(self, collection: str) -> List[Any]:
        model = model_for(collection)
        with _store_errors(f"list_all({collection})"):
            async with self.sessionmaker() as session:
                result = await session.execute(select(model))
                return list(result.scalars().all())

    async def get(self, collection: str, id: str):
        model = model_for(collection)
        with _store_errors(f"get({collection}/{id})"):
            async with self.sessionmaker() as session:
                return await session.get(model, id)

    async def resolve_ref(self, ref: Optional[DocumentRef]):
        """Record the reference points to, or None if it no longer exists."""
        if ref is None:
            return None
        record = await self.get(ref.collection, ref.id)
        if record is None:
            logger.debug("dangling reference: %s", ref)
        return record

    async def query_by_date_range(self, collection: str, start: datetime, end: datetime,
                                  field_name: str = "created_at") -> List[Any]:
        """Records with ``start <= field < end``."""
        model = model_for(collection)
        column = getattr(model, field_name)
        with _store_errors(f"query_by_date_range({collection})"):
            async with self.sessionmaker() as session:
                result = await session.execute(
                    select(model).where(column >= start, column < end)
                )
                return list(result.scalars().all())

    async def query_by_ref(self, collection: str, field_name: str, ref: DocumentRef) -> List[Any]:
        target = REFERENCE_FIELDS.get((collection, field_name))
        if target is None:
            raise ValueError(f"{collection}.{field_name} is not a reference field")
        if target != ref.collection:
            raise ValueError(f"{collection}.{field_name} references {target}, not {ref.collection}")
        model = model_for(collection)
        with _store_errors(f"query_by_ref({collection}.{field_name}={ref.id})"):
            async with self.sessionmaker() as session:
                result = await session.execute(
                    select(model).where(getattr(model, field_name) == ref.id)
                )
                return list(result.scalars().all())

    async def insert(self, collection: str, fields: Dict[str, Any]) -> str:
        model = model_for(collection)
        record = model(**fields)
        with _store_errors(f"insert({collection})"):
            async with self.sessionmaker() as session:
                session.add(record)
                await session.commit()
                return record.id

    async def update_field(self, collection: str, id: str, fields: Dict[str, Any]) -> None:
        model = model_for(collection)
        _check_mutable(fields)
        with _store_errors(f"update_field({collection}/{id})"):
            async with self.sessionmaker() as session:
                result = await session.execute(
                    update(model).where(model.id == id).values(**fields)
                )
                await session.commit()
        if result.rowcount == 0:
            raise ReferenceNotFound(collection, id)

    async def delete_one(self, collection: str, id: str) -> None:
        model = model_for(collection)
        with _store_errors(f"delete_one({collection}/{id})"):
            async with self.sessionmaker() as session:
                await session.execute(delete(model).where(model.id == id))
                await session.commit()

    async def commit_batch(self, operations: Sequence[BatchOperation]) -> None:
        """Apply every operation in one transaction, or none of them."""
        if not operations:
            return
        with _store_errors(f"commit_batch({len(operations)} ops)", BatchCommitFailed):
            async with self.sessionmaker() as session:
                async with session.begin():
                    for op in operations:
                        model = op.ref.model
                        if op.kind == "delete":
                            stmt = delete(model).where(model.id == op.ref.id)
                        else:
                            stmt = update(model).where(model.id == op.ref.id).values(**op.fields)
                        await session.execute(stmt)
        logger.debug("committed batch of %d operations", len(operations))
