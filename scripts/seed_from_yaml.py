"""Seed employees, error categories and error types from a YAML file.

Expected layout::

    employees:
      - Ali
      - Sara
    categories:
      Formatting: [Typo, Spacing]
      Content: [Wrong figure]
"""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import argparse
import asyncio
import logging
import yaml
from core.db import create_tables, dispose_engine, get_sessionmaker
from reference_store import ReferenceStore
from error_tracker import ErrorTracker
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

async def load_seed(tracker: ErrorTracker, data: dict) -> dict:
    """Insert what ``data`` describes, skipping names that already exist."""
    data = data or {}
    created = {"employees": 0, "categories": 0, "error_types": 0}

    existing_employees = {e.name for e in await tracker.list_employees()}
    for name in data.get("employees") or []:
        if name in existing_employees:
            continue
        await tracker.add_employee(name)
        existing_employees.add(name)
        created["employees"] += 1

    categories = {c.name: c.id for c in await tracker.list_categories()}
    existing_types = {(t.category_ref, t.name) for t in await tracker.list_error_types()}
    for category_name, type_names in (data.get("categories") or {}).items():
        category_id = categories.get(category_name)
        if category_id is None:
            category_id = await tracker.add_category(category_name)
            categories[category_name] = category_id
            created["categories"] += 1
        for type_name in type_names or []:
            if (category_id, type_name) in existing_types:
                continue
            await tracker.add_error_type(type_name, category_id)
            existing_types.add((category_id, type_name))
            created["error_types"] += 1
    return created

async def main(path: str):
    # 1. YAML 파일 로드
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    # 2. DB 테이블 생성 (없으면)
    await create_tables()
    # 3. 데이터 삽입
    tracker = ErrorTracker(ReferenceStore(get_sessionmaker()))
    try:
        created = await load_seed(tracker, data)
    finally:
        await dispose_engine()
    logger.info(f"{path} → DB 반영 완료: {created}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the error tracker from YAML")
    parser.add_argument("path", nargs="?", default="seed.yaml")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(main(args.path))
