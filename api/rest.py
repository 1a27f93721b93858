from fastapi import FastAPI, HTTPException, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from typing import List, Optional
from datetime import datetime, timezone
from io import StringIO
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import csv
import logging
from core.db import get_db, init_engine, get_sessionmaker
from api.auth import CurrentUser, get_current_user
from reference_store import ReferenceStore, ERROR_TYPES, ERROR_LOGS
from error_tracker import ErrorTracker
from reports import SortConfig, build_summary
from schemas.employee import EmployeeCreate, EmployeeRead
from schemas.error_category import ErrorCategoryCreate, ErrorCategoryUpdate, ErrorCategoryRead
from schemas.error_type import ErrorTypeCreate, ErrorTypeCreated, ErrorTypeRead
from schemas.error_log import ErrorLogCreate, ErrorLogRead, PopulatedErrorLog
from schemas.report import ReportSummary
from utils.exceptions import CustomException, GENERIC_FAILURE_MESSAGE

logger = logging.getLogger(__name__)

# DI: 세션 팩토리로 ErrorTracker 생성
def get_error_tracker() -> ErrorTracker:
    return ErrorTracker(ReferenceStore(get_sessionmaker()))

def _period(month: Optional[int], year: Optional[int]):
    # created_at은 UTC 기준
    now = datetime.now(timezone.utc)
    return (month or now.month), (year or now.year)

def create_app() -> FastAPI:
    app = FastAPI(title="Error Tracker", description="Employee error tracking dashboard API")

    @app.on_event("startup")
    async def on_startup():
        init_engine()

    # --- 직원 ---
    @app.get("/api/employees", response_model=List[EmployeeRead])
    async def list_employees(tracker: ErrorTracker = Depends(get_error_tracker),
                             current_user: CurrentUser = Depends(get_current_user)):
        return await tracker.list_employees()

    @app.post("/api/employees", response_model=EmployeeRead, status_code=201)
    async def add_employee(body: EmployeeCreate,
                           tracker: ErrorTracker = Depends(get_error_tracker),
                           current_user: CurrentUser = Depends(get_current_user)):
        try:
            employee_id = await tracker.add_employee(body.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return EmployeeRead(id=employee_id, name=body.name.strip())

    @app.delete("/api/employees/{id}", status_code=204)
    async def delete_employee(id: str,
                              tracker: ErrorTracker = Depends(get_error_tracker),
                              current_user: CurrentUser = Depends(get_current_user)):
        await tracker.delete_employee(id)
        return Response(status_code=204)

    # --- 카테고리 ---
    @app.get("/api/categories", response_model=List[ErrorCategoryRead])
    async def list_categories(tracker: ErrorTracker = Depends(get_error_tracker),
                              current_user: CurrentUser = Depends(get_current_user)):
        return await tracker.list_categories()

    @app.post("/api/categories", response_model=ErrorCategoryRead, status_code=201)
    async def add_category(body: ErrorCategoryCreate,
                           tracker: ErrorTracker = Depends(get_error_tracker),
                           current_user: CurrentUser = Depends(get_current_user)):
        try:
            category_id = await tracker.add_category(body.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return ErrorCategoryRead(id=category_id, name=body.name.strip())

    @app.patch("/api/categories/{id}", response_model=ErrorCategoryRead)
    async def update_category(id: str, body: ErrorCategoryUpdate,
                              tracker: ErrorTracker = Depends(get_error_tracker),
                              current_user: CurrentUser = Depends(get_current_user)):
        try:
            await tracker.update_category_name(id, body.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return ErrorCategoryRead(id=id, name=body.name.strip())

    @app.delete("/api/categories/{id}", status_code=204)
    async def delete_category(id: str,
                              tracker: ErrorTracker = Depends(get_error_tracker),
                              current_user: CurrentUser = Depends(get_current_user)):
        await tracker.delete_category(id)
        return Response(status_code=204)

    # --- 오류 유형 ---
    @app.get("/api/error-types", response_model=List[ErrorTypeRead])
    async def list_error_types(tracker: ErrorTracker = Depends(get_error_tracker),
                               current_user: CurrentUser = Depends(get_current_user)):
        return await tracker.list_error_types()

    @app.post("/api/error-types", response_model=ErrorTypeCreated, status_code=201)
    async def add_error_type(body: ErrorTypeCreate,
                             tracker: ErrorTracker = Depends(get_error_tracker),
                             current_user: CurrentUser = Depends(get_current_user)):
        try:
            type_id = await tracker.add_error_type(body.name, body.category_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return await tracker.store.get(ERROR_TYPES, type_id)

    @app.delete("/api/error-types/{id}", status_code=204)
    async def delete_error_type(id: str,
                                tracker: ErrorTracker = Depends(get_error_tracker),
                                current_user: CurrentUser = Depends(get_current_user)):
        await tracker.delete_error_type(id)
        return Response(status_code=204)

    # --- 오류 로그 ---
    @app.get("/api/error-logs", response_model=List[PopulatedErrorLog])
    async def get_error_logs(month: Optional[int] = Query(None, ge=1, le=12),
                             year: Optional[int] = Query(None, ge=1, le=9998),
                             tracker: ErrorTracker = Depends(get_error_tracker),
                             current_user: CurrentUser = Depends(get_current_user)):
        month, year = _period(month, year)
        return await tracker.get_filtered_error_logs(month, year)

    @app.post("/api/error-logs", response_model=ErrorLogRead, status_code=201)
    async def add_error_log(body: ErrorLogCreate,
                            tracker: ErrorTracker = Depends(get_error_tracker),
                            current_user: CurrentUser = Depends(get_current_user)):
        log_id = await tracker.add_error_log(body.employee_id, body.type_id)
        logger.info("error logged by %s: employee=%s type=%s", current_user.sub, body.employee_id, body.type_id)
        return await tracker.store.get(ERROR_LOGS, log_id)

    @app.delete("/api/error-logs/{id}", status_code=204)
    async def delete_error_log(id: str,
                               tracker: ErrorTracker = Depends(get_error_tracker),
                               current_user: CurrentUser = Depends(get_current_user)):
        await tracker.delete_error_log(id)
        return Response(status_code=204)

    @app.get("/api/error-logs/download")
    async def download_error_logs(month: Optional[int] = Query(None, ge=1, le=12),
                                  year: Optional[int] = Query(None, ge=1, le=9998),
                                  tracker: ErrorTracker = Depends(get_error_tracker),
                                  current_user: CurrentUser = Depends(get_current_user)):
        month, year = _period(month, year)
        rows = await tracker.get_filtered_error_logs(month, year)
        rows.sort(key=lambda r: r.created_at)
        # CSV 변환
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(["id", "created_at", "employee_id", "employee_name",
                         "error_type_name", "error_category_name", "category_id"])
        for r in rows:
            writer.writerow([
                r.id, r.created_at.isoformat(), r.employee_id, r.employee_name,
                r.error_type_name, r.error_category_name, r.category_id
            ])
        output.seek(0)
        filename = f"error_logs_{year:04d}_{month:02d}.csv"
        return StreamingResponse(output, media_type="text/csv",
                                 headers={"Content-Disposition": f"attachment; filename={filename}"})

    # --- 리포트 ---
    @app.get("/api/reports/summary", response_model=ReportSummary)
    async def report_summary(month: Optional[int] = Query(None, ge=1, le=12),
                             year: Optional[int] = Query(None, ge=1, le=9998),
                             employee_id: str = "all",
                             sort_key: str = "count",
                             sort_direction: str = "descending",
                             tracker: ErrorTracker = Depends(get_error_tracker),
                             current_user: CurrentUser = Depends(get_current_user)):
        try:
            sort_config = SortConfig(sort_key, sort_direction)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        month, year = _period(month, year)
        rows = await tracker.get_filtered_error_logs(month, year)
        return build_summary(rows, month, year, employee_id=employee_id, sort_config=sort_config)

    # DB 연결 상태 확인 엔드포인트
    @app.get("/health/db")
    async def health_check(db: AsyncSession = Depends(get_db)):
        try:
            await db.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as e:
            logger.warning("db health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "error", "detail": GENERIC_FAILURE_MESSAGE})

    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException):
        logger.error(f"[{exc.code}] {exc.dev_message} | {request.url}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict()
        )

    return app

app = create_app()
