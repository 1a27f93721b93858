from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class ErrorLogCreate(BaseModel):
    employee_id: str
    type_id: str

class ErrorLogRead(BaseModel):
    id: str
    employee_ref: Optional[str]
    type_ref: Optional[str]
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

class PopulatedErrorLog(BaseModel):
    """Report row: an error log joined with its employee, type and category."""
    id: str
    created_at: datetime
    employee_id: str
    employee_name: str
    error_type_name: str
    error_category_name: str
    category_id: str
