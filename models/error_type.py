from sqlalchemy import Column, String
from .base import Base, new_id

class ErrorType(Base):
    __tablename__ = 'error_types'
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    # error_categories.id 약한 참조 (FK 제약 없음, 삭제 시 dangling 가능)
    category_ref = Column(String(32), nullable=True, index=True)

    def __repr__(self):
        return f"<ErrorType(id='{self.id}', name='{self.name}', category_ref='{self.category_ref}')>"
