"""initial schema

Revision ID: 3f2a9c1d7e10
Revises: 
Create Date: 2026-10-19 10:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns store member names, matching SQLAlchemy's default for Enum(PyEnum)
user_role = sa.Enum('ba', 'client', 'developer', name='userrole')
account_status = sa.Enum('active', 'inactive', name='accountstatus')
billing_type = sa.Enum('hourly', 'fixed', name='billingtype')
project_status = sa.Enum('planning', 'active', 'on_hold', 'completed', 'cancelled', name='projectstatus')
task_status = sa.Enum('todo', 'in_progress', 'review', 'completed', 'blocked', name='taskstatus')
task_priority = sa.Enum('low', 'medium', 'high', 'urgent', name='taskpriority')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=256), nullable=False),
        sa.Column('password_hash', sa.String(length=512), nullable=False),
        sa.Column('role', user_role, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'business_analysts',
        sa.Column('id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('billing_type', billing_type, nullable=False),
        sa.Column('status', account_status, nullable=False),
        sa.Column('creating_user_id', sa.Integer(), sa.ForeignKey('business_analysts.id'), nullable=False),
    )
    op.create_index('ix_clients_status', 'clients', ['status'])

    op.create_table(
        'developers',
        sa.Column('id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('hourly_rate', sa.Float(), nullable=False),
        sa.Column('developer_role', sa.String(length=100), nullable=False),
        sa.Column('status', account_status, nullable=False),
        sa.Column('creating_user_id', sa.Integer(), sa.ForeignKey('business_analysts.id'), nullable=False),
    )
    op.create_index('ix_developers_status', 'developers', ['status'])

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('status', project_status, nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('actual_hours', sa.Float(), nullable=False, server_default='0'),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('billing_type', billing_type, nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('name', 'client_id', name='uq_projects_name_client'),
    )
    op.create_index('ix_projects_id', 'projects', ['id'])
    op.create_index('ix_projects_client_id', 'projects', ['client_id'])
    op.create_index('ix_projects_status', 'projects', ['status'])

    op.create_table(
        'project_developers',
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id'), primary_key=True),
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('status', task_status, nullable=False),
        sa.Column('priority', task_priority, nullable=False),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('actual_hours', sa.Float(), nullable=False, server_default='0'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_tasks_id', 'tasks', ['id'])
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])
    op.create_index('ix_tasks_priority', 'tasks', ['priority'])

    op.create_table(
        'task_assignees',
        sa.Column('task_id', sa.Integer(), sa.ForeignKey('tasks.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id'), primary_key=True),
    )

    op.create_table(
        'hour_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id'), nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('task_id', sa.Integer(), sa.ForeignKey('tasks.id'), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('hours', sa.Float(), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('hours > 0 AND hours <= 24', name='ck_hour_logs_hours_range'),
    )
    op.create_index('ix_hour_logs_id', 'hour_logs', ['id'])
    op.create_index('ix_hour_logs_project_id', 'hour_logs', ['project_id'])
    op.create_index('ix_hour_logs_task_id', 'hour_logs', ['task_id'])
    op.create_index('ix_hour_logs_client_date', 'hour_logs', ['client_id', 'date'])
    op.create_index('ix_hour_logs_developer_date', 'hour_logs', ['developer_id', 'date'])
    op.create_index('ix_hour_logs_date', 'hour_logs', ['date'])
    op.create_index('ix_hour_logs_created_by', 'hour_logs', ['created_by'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('hour_logs')
    op.drop_table('task_assignees')
    op.drop_table('tasks')
    op.drop_table('project_developers')
    op.drop_table('projects')
    op.drop_table('developers')
    op.drop_table('clients')
    op.drop_table('business_analysts')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (task_priority, task_status, project_status, billing_type, account_status, user_role):
        enum_type.drop(bind, checkfirst=True)
