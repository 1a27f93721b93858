from sqlalchemy import Column, String
from .base import Base, new_id

class ErrorCategory(Base):
    __tablename__ = 'error_categories'
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<ErrorCategory(id='{self.id}', name='{self.name}')>"
