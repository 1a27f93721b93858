from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union
from schemas.error_log import PopulatedErrorLog
from schemas.report import CategoryCount, EmployeeCount, EmployeeCategoryMatrix, ReportSummary

ALL_EMPLOYEES = "all"
SORT_KEYS = ("name", "count")
ASCENDING = "ascending"
DESCENDING = "descending"


@dataclass(frozen=True)
class SortConfig:
    key: str = "count"
    direction: str = DESCENDING

    def __post_init__(self):
        if self.key not in SORT_KEYS:
            raise ValueError(f"sort key must be one of {SORT_KEYS}, got {self.key!r}")
        if self.direction not in (ASCENDING, DESCENDING):
            raise ValueError(f"sort direction must be ascending or descending, got {self.direction!r}")


def request_sort(current: Optional[SortConfig], key: str) -> SortConfig:
    """Next sort state after clicking ``key``: ascending, or descending if already ascending on it."""
    if current is not None and current.key == key and current.direction == ASCENDING:
        return SortConfig(key, DESCENDING)
    return SortConfig(key, ASCENDING)


def filter_by_employee(rows: Sequence[PopulatedErrorLog], employee_id: Optional[str]) -> List[PopulatedErrorLog]:
    if not employee_id or employee_id == ALL_EMPLOYEES:
        return list(rows)
    return [row for row in rows if row.employee_id == employee_id]


def category_breakdown(rows: Sequence[PopulatedErrorLog]) -> List[CategoryCount]:
    counts = Counter(row.error_category_name for row in rows)
    items = [CategoryCount(name=name, value=value) for name, value in counts.items()]
    return sorted(items, key=lambda c: c.value, reverse=True)


def employee_counts(rows: Sequence[PopulatedErrorLog]) -> List[EmployeeCount]:
    counts = Counter(row.employee_name for row in rows)
    return [EmployeeCount(name=name, count=count) for name, count in counts.items()]


def sort_employee_counts(items: Sequence[EmployeeCount], config: Optional[SortConfig]) -> List[EmployeeCount]:
    if config is None:
        return list(items)
    return sorted(items, key=lambda item: getattr(item, config.key), reverse=config.direction == DESCENDING)


def employee_category_matrix(rows: Sequence[PopulatedErrorLog],
                             all_rows: Sequence[PopulatedErrorLog]) -> EmployeeCategoryMatrix:
    """Per-employee count for every category, for stacked bars.

    Category columns come from ``all_rows`` so the set stays stable while
    ``rows`` is narrowed to one employee.
    """
    if not rows:
        return EmployeeCategoryMatrix()
    categories = sorted({row.error_category_name for row in all_rows})
    by_employee: Dict[str, Dict[str, Union[str, int]]] = {}
    for row in rows:
        entry = by_employee.get(row.employee_name)
        if entry is None:
            entry = {"name": row.employee_name}
            entry.update({category: 0 for category in categories})
            by_employee[row.employee_name] = entry
        entry[row.error_category_name] = entry.get(row.error_category_name, 0) + 1
    data = []
    for entry in by_employee.values():
        entry["total"] = sum(entry.get(category, 0) for category in categories)
        data.append(entry)
    return EmployeeCategoryMatrix(categories=categories, data=data)


def build_summary(all_rows: Sequence[PopulatedErrorLog], month: int, year: int,
                  employee_id: Optional[str] = None,
                  sort_config: Optional[SortConfig] = None) -> ReportSummary:
    sort_config = sort_config or SortConfig()
    rows = filter_by_employee(all_rows, employee_id)
    return ReportSummary(
        month=month,
        year=year,
        employee_id=employee_id or ALL_EMPLOYEES,
        total_errors=len(rows),
        category_breakdown=category_breakdown(rows),
        employee_counts=sort_employee_counts(employee_counts(rows), sort_config),
        employee_category=employee_category_matrix(rows, all_rows),
        sort_key=sort_config.key,
        sort_direction=sort_config.direction,
    )
