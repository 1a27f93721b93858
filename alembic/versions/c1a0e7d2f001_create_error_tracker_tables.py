"""
create error tracker tables

Revision ID: c1a0e7d2f001
Revises:
Create Date: 2025-04-02 10:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c1a0e7d2f001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
    )
    op.create_table(
        'error_categories',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
    )
    # 약한 참조 컬럼: FK 제약 없음
    op.create_table(
        'error_types',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('category_ref', sa.String(32), nullable=True),
    )
    op.create_index('ix_error_types_category_ref', 'error_types', ['category_ref'])
    op.create_table(
        'error_logs',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('employee_ref', sa.String(32), nullable=True),
        sa.Column('type_ref', sa.String(32), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    )
    op.create_index('ix_error_logs_employee_ref', 'error_logs', ['employee_ref'])
    op.create_index('ix_error_logs_type_ref', 'error_logs', ['type_ref'])
    op.create_index('ix_error_logs_created_at', 'error_logs', ['created_at'])

def downgrade() -> None:
    op.drop_index('ix_error_logs_created_at', table_name='error_logs')
    op.drop_index('ix_error_logs_type_ref', table_name='error_logs')
    op.drop_index('ix_error_logs_employee_ref', table_name='error_logs')
    op.drop_table('error_logs')
    op.drop_index('ix_error_types_category_ref', table_name='error_types')
    op.drop_table('error_types')
    op.drop_table('error_categories')
    op.drop_table('employees')
