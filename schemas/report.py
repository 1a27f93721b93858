from pydantic import BaseModel
from typing import Dict, List, Union

class CategoryCount(BaseModel):
    name: str
    value: int

class EmployeeCount(BaseModel):
    name: str
    count: int

class EmployeeCategoryMatrix(BaseModel):
    categories: List[str] = []
    # {"name": 직원명, <카테고리명>: 건수, ..., "total": 합계}
    data: List[Dict[str, Union[str, int]]] = []

class ReportSummary(BaseModel):
    month: int
    year: int
    employee_id: str
    total_errors: int
    category_breakdown: List[CategoryCount]
    employee_counts: List[EmployeeCount]
    employee_category: EmployeeCategoryMatrix
    sort_key: str
    sort_direction: str
