from pydantic import BaseModel, Field

class ErrorCategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

class ErrorCategoryCreate(ErrorCategoryBase):
    pass

class ErrorCategoryUpdate(ErrorCategoryBase):
    pass

class ErrorCategoryRead(ErrorCategoryBase):
    id: str

    model_config = {
        "from_attributes": True
    }
