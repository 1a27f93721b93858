from pydantic import BaseModel, Field
from typing import Optional

class ErrorTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category_id: str

class ErrorTypeRead(BaseModel):
    id: str
    name: str
    category_ref: Optional[str] = None
    # 카테고리 해석 결과 (삭제된 경우 sentinel 라벨)
    category_name: str

    model_config = {
        "from_attributes": True
    }

class ErrorTypeCreated(BaseModel):
    id: str
    name: str
    category_ref: Optional[str] = None

    model_config = {
        "from_attributes": True
    }
