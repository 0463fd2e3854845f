"""timesheets initial schema

Revision ID: 0001_timesheets_initial
Revises:
Create Date: 2026-02-02 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_timesheets_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),  # ADMIN, EMPLOYEE
        sa.Column('workday_hours', sa.Integer(), nullable=False),  # 4, 6, 8
        sa.Column('salary_fixed', sa.Float(), nullable=False),
        sa.Column('bonus_fixed', sa.Float(), nullable=False),
        sa.Column('vouchers_fixed', sa.Float(), nullable=False),
        sa.Column('hourly_cost', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_employees_email', 'employees', ['email'], unique=True)
    op.create_index('ix_employees_is_active', 'employees', ['is_active'])

    op.create_table(
        'clients',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('tax_id', sa.String(length=64), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'services',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('pricing_type', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tasks_service_id', 'tasks', ['service_id'])

    op.create_table(
        'client_services',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('client_id', sa.String(length=64), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=False),
        sa.Column('pricing_type', sa.String(length=32), nullable=False),
        sa.Column('monthly_fixed_price', sa.Float(), nullable=True),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('one_time_price', sa.Float(), nullable=True),
        sa.Column('commission_rate_pct', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', 'service_id', name='uq_client_services_client_service')
    )
    op.create_index('ix_client_services_client_id', 'client_services', ['client_id'])

    # One report per (employee, month); concurrent creates collide here
    op.create_table(
        'monthly_reports',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('employee_id', sa.String(length=64), nullable=False),
        sa.Column('month_key', sa.String(length=7), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),  # OPEN, SUBMITTED, UNLOCKED
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('unlocked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('meta_spend', sa.Float(), nullable=True),
        sa.Column('google_spend', sa.Float(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'month_key', name='uq_monthly_reports_employee_month')
    )
    op.create_index('ix_monthly_reports_employee_id', 'monthly_reports', ['employee_id'])
    op.create_index('ix_monthly_reports_month_key', 'monthly_reports', ['month_key'])

    op.create_table(
        'time_entries',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('report_id', sa.String(length=64), nullable=False),
        sa.Column('employee_id', sa.String(length=64), nullable=False),
        sa.Column('client_id', sa.String(length=64), nullable=False),
        sa.Column('client_service_id', sa.String(length=64), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=False),
        sa.Column('task_id', sa.String(length=64), nullable=False),
        sa.Column('hours', sa.Float(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_time_entries_report_id', 'time_entries', ['report_id'])
    op.create_index('ix_time_entries_employee_id', 'time_entries', ['employee_id'])
    op.create_index('ix_time_entries_client_id', 'time_entries', ['client_id'])

    op.create_table(
        'edit_requests',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('report_id', sa.String(length=64), nullable=False),
        sa.Column('employee_id', sa.String(length=64), nullable=False),
        sa.Column('month_key', sa.String(length=7), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),  # PENDING, APPROVED, DENIED
        sa.Column('admin_id', sa.String(length=64), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_edit_requests_report_id', 'edit_requests', ['report_id'])
    op.create_index('ix_edit_requests_employee_id', 'edit_requests', ['employee_id'])
    op.create_index('ix_edit_requests_status', 'edit_requests', ['status'])


def downgrade() -> None:
    op.drop_table('edit_requests')
    op.drop_table('time_entries')
    op.drop_table('monthly_reports')
    op.drop_table('client_services')
    op.drop_table('tasks')
    op.drop_table('services')
    op.drop_table('clients')
    op.drop_table('employees')
