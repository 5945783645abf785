"""Leave ledger initial schema

Revision ID: 001_leave_ledger
Revises:
Create Date: 2026-10-18

- employees, holidays: collaborator tables the engine references.
- leave_applications: uuid-keyed, soft-deletable (deleted_at).
- leave_balances: one row per (employee_id, leave_type, pool); used_hours >= 0.
- adjustment_logs: append-only; id is the sequence number.
- signatures: approve/reject provenance.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_leave_ledger'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_VALUES = {
    'leavecategory': ('PERSONAL', 'BONUS', 'SICK'),
    'leavestatus': ('PENDING', 'APPROVED', 'REJECTED', 'CANCELED'),
    'balancepool': ('GENERAL', 'ANNUAL'),
    'signatureevent': ('APPROVE', 'REJECT'),
}


def _enum_types(bind):
    """Column types per enum name; native ENUMs are created once up front on PostgreSQL."""
    if bind.dialect.name == 'sqlite':
        return {name: sa.String(20) for name in ENUM_VALUES}
    types = {}
    for name, values in ENUM_VALUES.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)
        types[name] = postgresql.ENUM(*values, name=name, create_type=False)
    return types


def _timestamps():
    # SQL-standard CURRENT_TIMESTAMP works on SQLite and Postgres
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    # Skip if tables already exist (e.g. DB created by app create_all())
    bind = op.get_bind()
    existing = sa.inspect(bind).get_table_names()
    if 'leave_applications' in existing:
        return

    enums = _enum_types(bind)

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('emp_code', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)
    op.create_index(op.f('ix_employees_emp_code'), 'employees', ['emp_code'], unique=True)

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('year', 'date', name='uq_holiday_year_date'),
    )
    op.create_index(op.f('ix_holidays_year'), 'holidays', ['year'], unique=False)
    op.create_index(op.f('ix_holidays_date'), 'holidays', ['date'], unique=False)

    op.create_table(
        'leave_applications',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=False),
        sa.Column('leave_type', enums['leavecategory'], nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('hours', sa.Numeric(7, 2), nullable=False, server_default='0'),
        sa.Column('status', enums['leavestatus'], nullable=False, server_default='PENDING'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('uuid'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id']),
        sa.ForeignKeyConstraint(['manager_id'], ['employees.id']),
        sa.CheckConstraint('hours >= 0', name='check_leave_application_hours_non_negative'),
    )
    op.create_index(op.f('ix_leave_applications_employee_id'), 'leave_applications', ['employee_id'], unique=False)
    op.create_index(op.f('ix_leave_applications_manager_id'), 'leave_applications', ['manager_id'], unique=False)
    op.create_index(op.f('ix_leave_applications_deleted_at'), 'leave_applications', ['deleted_at'], unique=False)
    op.create_index(
        'ix_leave_applications_employee_times', 'leave_applications',
        ['employee_id', 'start_time', 'end_time'], unique=False,
    )

    op.create_table(
        'leave_balances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('leave_type', enums['leavecategory'], nullable=False),
        sa.Column('pool', enums['balancepool'], nullable=False),
        sa.Column('quota_hours', sa.Numeric(7, 2), nullable=True),
        sa.Column('used_hours', sa.Numeric(9, 2), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id']),
        sa.UniqueConstraint('employee_id', 'leave_type', 'pool', name='uq_leave_balances_employee_type_pool'),
        sa.CheckConstraint('used_hours >= 0', name='check_leave_balances_used_non_negative'),
    )
    op.create_index(op.f('ix_leave_balances_id'), 'leave_balances', ['id'], unique=False)
    op.create_index(op.f('ix_leave_balances_employee_id'), 'leave_balances', ['employee_id'], unique=False)

    op.create_table(
        'adjustment_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('leave_application_uuid', sa.String(36), nullable=False),
        sa.Column('general_hours', sa.Numeric(7, 2), nullable=False, server_default='0'),
        sa.Column('annual_hours', sa.Numeric(7, 2), nullable=False, server_default='0'),
        sa.Column('is_returning', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_adjustment_logs_id'), 'adjustment_logs', ['id'], unique=False)
    op.create_index(
        op.f('ix_adjustment_logs_leave_application_uuid'), 'adjustment_logs',
        ['leave_application_uuid'], unique=False,
    )

    op.create_table(
        'signatures',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('leave_application_uuid', sa.String(36), nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=False),
        sa.Column('event', enums['signatureevent'], nullable=False),
        sa.Column('signed_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['manager_id'], ['employees.id']),
    )
    op.create_index(op.f('ix_signatures_id'), 'signatures', ['id'], unique=False)
    op.create_index(op.f('ix_signatures_leave_application_uuid'), 'signatures', ['leave_application_uuid'], unique=False)
    op.create_index(op.f('ix_signatures_manager_id'), 'signatures', ['manager_id'], unique=False)


def downgrade() -> None:
    op.drop_table('signatures')
    op.drop_table('adjustment_logs')
    op.drop_table('leave_balances')
    op.drop_table('leave_applications')
    op.drop_table('holidays')
    op.drop_table('employees')
    bind = op.get_bind()
    if bind.dialect.name != 'sqlite':
        for name, values in ENUM_VALUES.items():
            postgresql.ENUM(*values, name=name).drop(bind, checkfirst=True)
