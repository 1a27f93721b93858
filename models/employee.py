from sqlalchemy import Column, String
from .base import Base, new_id

class Employee(Base):
    __tablename__ = 'employees'
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Employee(id='{self.id}', name='{self.name}')>"
