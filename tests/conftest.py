import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import tempfile
from datetime import datetime
import pytest
import pytest_asyncio

import core.db as dbmod
from core.db import Base
import models  # noqa: F401  (테이블 메타데이터 등록)
from reference_store import ReferenceStore, EMPLOYEES, ERROR_CATEGORIES, ERROR_TYPES, ERROR_LOGS
from error_tracker import ErrorTracker
from utils.jwt import create_access_token

@pytest.fixture
def temp_db_url():
    db_fd, db_path = tempfile.mkstemp(suffix=".sqlite3")
    yield f"sqlite+aiosqlite:///{db_path}"
    os.close(db_fd)
    os.remove(db_path)

# 테스트마다 임시 DB로 전역 엔진 교체
@pytest_asyncio.fixture
async def session_factory(temp_db_url):
    await dbmod.dispose_engine()
    engine = dbmod.init_engine(temp_db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield dbmod.get_sessionmaker()
    await dbmod.dispose_engine()

@pytest.fixture
def store(session_factory):
    return ReferenceStore(session_factory)

@pytest.fixture
def tracker(store):
    return ErrorTracker(store)

@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": "admin@example.com", "email": "admin@example.com"})
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def seed(store):
    """Helpers that write rows straight through the store, bypassing reference checks."""
    class Seed:
        async def employee(self, name):
            return await store.insert(EMPLOYEES, {"name": name})

        async def category(self, name):
            return await store.insert(ERROR_CATEGORIES, {"name": name})

        async def error_type(self, name, category_id):
            return await store.insert(ERROR_TYPES, {"name": name, "category_ref": category_id})

        async def log(self, employee_id, type_id, created_at=None):
            fields = {"employee_ref": employee_id, "type_ref": type_id}
            if created_at is not None:
                fields["created_at"] = created_at
            return await store.insert(ERROR_LOGS, fields)

        async def log_on(self, employee_id, type_id, *args):
            return await self.log(employee_id, type_id, datetime(*args))

    return Seed()
