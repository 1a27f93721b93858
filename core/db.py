import os
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from dotenv import load_dotenv

# .env 파일에서 환경변수 로드
load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./errortracker.db")

# Base 정의 (모델에서 import)
Base = declarative_base()

# 싱글턴 엔진/세션
engine = None
SessionLocal = None

def _connect_args(db_url):
    return {"check_same_thread": False} if db_url.startswith("sqlite") else {}

def init_engine(db_url=DATABASE_URL):
    global engine, SessionLocal
    if engine is None:
        engine = create_async_engine(db_url, future=True, connect_args=_connect_args(db_url))
        SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine

async def dispose_engine():
    global engine, SessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    SessionLocal = None

async def create_tables():
    # 모델 등록
    import models  # noqa: F401
    async with init_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# Alembic용 동기 URL
SYNC_DATABASE_URL = DATABASE_URL.replace("+aiosqlite", "") if "+aiosqlite" in DATABASE_URL else DATABASE_URL

def get_db_url():
    return DATABASE_URL

def get_engine():
    return engine

def get_sessionmaker():
    if SessionLocal is None:
        init_engine()
    return SessionLocal

# FastAPI 의존성 주입용 세션 생성 함수
async def get_db():
    async with get_sessionmaker()() as session:
        yield session
