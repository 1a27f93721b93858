from datetime import datetime
import pytest
from reference_store import (
    ReferenceStore, DocumentRef, BatchOperation,
    EMPLOYEES, ERROR_CATEGORIES, ERROR_TYPES, ERROR_LOGS,
)
from utils.exceptions import StoreUnavailable, BatchCommitFailed, ReferenceNotFound
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession


@pytest.mark.asyncio
async def test_insert_get_and_list(store):
    emp_id = await store.insert(EMPLOYEES, {"name": "Ali"})
    await store.insert(EMPLOYEES, {"name": "Sara"})
    assert isinstance(emp_id, str) and emp_id

    loaded = await store.get(EMPLOYEES, emp_id)
    assert loaded.name == "Ali"

    names = sorted(e.name for e in await store.list_all(EMPLOYEES))
    assert names == ["Ali", "Sara"]


@pytest.mark.asyncio
async def test_ids_are_not_reused(store):
    first = await store.insert(EMPLOYEES, {"name": "Ali"})
    await store.delete_one(EMPLOYEES, first)
    second = await store.insert(EMPLOYEES, {"name": "Sara"})
    assert first != second
    assert await store.resolve_ref(store.ref(EMPLOYEES, first)) is None


@pytest.mark.asyncio
async def test_resolve_ref_returns_none_for_missing_target(store):
    cat_id = await store.insert(ERROR_CATEGORIES, {"name": "Formatting"})
    ref = store.ref(ERROR_CATEGORIES, cat_id)
    assert (await store.resolve_ref(ref)).name == "Formatting"
    assert await store.resolve_ref(store.ref(ERROR_CATEGORIES, "missing")) is None
    assert await store.resolve_ref(None) is None


@pytest.mark.asyncio
async def test_ref_of_reads_weak_reference_columns(store):
    cat_id = await store.insert(ERROR_CATEGORIES, {"name": "Formatting"})
    type_id = await store.insert(ERROR_TYPES, {"name": "Typo", "category_ref": cat_id})
    orphan_id = await store.insert(ERROR_TYPES, {"name": "Orphan"})

    error_type = await store.get(ERROR_TYPES, type_id)
    assert store.ref_of(error_type, "category_ref") == DocumentRef(ERROR_CATEGORIES, cat_id)
    assert store.ref_of(await store.get(ERROR_TYPES, orphan_id), "category_ref") is None
    with pytest.raises(ValueError):
        store.ref_of(error_type, "name")


def test_unknown_collection_is_rejected():
    with pytest.raises(ValueError):
        DocumentRef("users", "1")
    with pytest.raises(ValueError):
        BatchOperation("truncate", DocumentRef(EMPLOYEES, "1"))


@pytest.mark.asyncio
async def test_query_by_date_range_is_half_open(store, seed):
    start = datetime(2025, 4, 1)
    end = datetime(2025, 5, 1)
    at_start = await seed.log("e", "t", start)
    inside = await seed.log("e", "t", datetime(2025, 4, 30, 23, 59, 59))
    await seed.log("e", "t", end)
    await seed.log("e", "t", datetime(2025, 3, 31, 23, 59, 59))

    found = {log.id for log in await store.query_by_date_range(ERROR_LOGS, start, end)}
    assert found == {at_start, inside}


@pytest.mark.asyncio
async def test_query_by_ref(store, seed):
    ali = await seed.employee("Ali")
    sara = await seed.employee("Sara")
    a1 = await seed.log(ali, "t")
    a2 = await seed.log(ali, "t")
    await seed.log(sara, "t")

    logs = await store.query_by_ref(ERROR_LOGS, "employee_ref", store.ref(EMPLOYEES, ali))
    assert {log.id for log in logs} == {a1, a2}

    # 참조 대상 컬렉션 불일치
    with pytest.raises(ValueError):
        await store.query_by_ref(ERROR_LOGS, "employee_ref", store.ref(ERROR_TYPES, ali))
    with pytest.raises(ValueError):
        await store.query_by_ref(ERROR_LOGS, "created_at", store.ref(EMPLOYEES, ali))


@pytest.mark.asyncio
async def test_update_field(store):
    cat_id = await store.insert(ERROR_CATEGORIES, {"name": "Formatting"})
    await store.update_field(ERROR_CATEGORIES, cat_id, {"name": "Layout"})
    assert (await store.get(ERROR_CATEGORIES, cat_id)).name == "Layout"

    with pytest.raises(ReferenceNotFound):
        await store.update_field(ERROR_CATEGORIES, "missing", {"name": "X"})


@pytest.mark.asyncio
async def test_created_at_is_immutable(store, seed):
    log_id = await seed.log("e", "t")
    log = await store.get(ERROR_LOGS, log_id)
    assert log.created_at is not None
    with pytest.raises(ValueError):
        await store.update_field(ERROR_LOGS, log_id, {"created_at": datetime(2000, 1, 1)})
    with pytest.raises(ValueError):
        BatchOperation.update(store.ref(ERROR_LOGS, log_id), {"created_at": datetime(2000, 1, 1)})


@pytest.mark.asyncio
async def test_delete_one_is_idempotent(store):
    emp_id = await store.insert(EMPLOYEES, {"name": "Ali"})
    await store.delete_one(EMPLOYEES, emp_id)
    await store.delete_one(EMPLOYEES, emp_id)
    assert await store.get(EMPLOYEES, emp_id) is None


@pytest.mark.asyncio
async def test_commit_batch_applies_all_operations(store):
    a = await store.insert(EMPLOYEES, {"name": "Ali"})
    b = await store.insert(EMPLOYEES, {"name": "Sara"})
    cat_id = await store.insert(ERROR_CATEGORIES, {"name": "Formatting"})

    await store.commit_batch([
        BatchOperation.delete(store.ref(EMPLOYEES, a)),
        BatchOperation.delete(store.ref(EMPLOYEES, b)),
        BatchOperation.update(store.ref(ERROR_CATEGORIES, cat_id), {"name": "Layout"}),
    ])
    assert await store.list_all(EMPLOYEES) == []
    assert (await store.get(ERROR_CATEGORIES, cat_id)).name == "Layout"


@pytest.mark.asyncio
async def test_commit_batch_is_all_or_nothing(store):
    a = await store.insert(EMPLOYEES, {"name": "Ali"})
    cat_id = await store.insert(ERROR_CATEGORIES, {"name": "Formatting"})

    # name NOT NULL 위반으로 배치 중간 실패
    with pytest.raises(BatchCommitFailed) as exc_info:
        await store.commit_batch([
            BatchOperation.delete(store.ref(EMPLOYEES, a)),
            BatchOperation.update(store.ref(ERROR_CATEGORIES, cat_id), {"name": None}),
        ])
    assert exc_info.value.code == "BATCH_COMMIT_FAILED"
    assert await store.get(EMPLOYEES, a) is not None
    assert (await store.get(ERROR_CATEGORIES, cat_id)).name == "Formatting"


@pytest.mark.asyncio
async def test_commit_batch_with_no_operations(store):
    await store.commit_batch([])


@pytest.mark.asyncio
async def test_transport_failure_raises_store_unavailable(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path}/missing-dir/app.db"
    engine = create_async_engine(url, future=True)
    broken = ReferenceStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    try:
        with pytest.raises(StoreUnavailable) as exc_info:
            await broken.list_all(EMPLOYEES)
        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Operation failed."
        with pytest.raises(StoreUnavailable):
            await broken.insert(EMPLOYEES, {"name": "Ali"})
        with pytest.raises(BatchCommitFailed):
            await broken.commit_batch([BatchOperation.delete(DocumentRef(EMPLOYEES, "x"))])
    finally:
        await engine.dispose()
