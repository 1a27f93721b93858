from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.dialects import sqlite
from .base import Base, new_id

# SQLite는 문자열로 비교하므로 CURRENT_TIMESTAMP와 같은 초 단위 형식으로 저장/바인딩
Timestamp = DateTime().with_variant(sqlite.DATETIME(truncate_microseconds=True), "sqlite")

class ErrorLog(Base):
    __tablename__ = 'error_logs'
    id = Column(String(32), primary_key=True, default=new_id)
    # 약한 참조: employees.id / error_types.id
    employee_ref = Column(String(32), nullable=True, index=True)
    type_ref = Column(String(32), nullable=True, index=True)
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<ErrorLog(id='{self.id}', employee_ref='{self.employee_ref}', type_ref='{self.type_ref}')>"
