"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_ONLY = sa.text("status IN ('pending', 'confirmed')")


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text()),
        sa.Column('email', sa.Text(), unique=True),
        sa.Column('phone', sa.Text()),
        sa.Column('role', sa.Enum('client', 'admin', name='user_role'), nullable=False, server_default=sa.text("'client'")),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        'staff_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text()),
        sa.Column('specialization', sa.Text()),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.Text()),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.CheckConstraint('duration_minutes > 0'),
    )

    op.create_table(
        'working_hours',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('staff_id', sa.Integer(), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('break_start', sa.Time()),
        sa.Column('break_end', sa.Time()),
        sa.UniqueConstraint('staff_id', 'day_of_week'),
        sa.CheckConstraint('day_of_week BETWEEN 1 AND 7'),
    )

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('staff_id', sa.Integer(), sa.ForeignKey('staff_members.id', ondelete='CASCADE')),
    )

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('staff_id', sa.Integer(), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('appointment_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'confirmed', 'cancelled', 'completed', 'no_show', name='appointment_status'),
            nullable=False,
        ),
        sa.Column('notes', sa.Text()),
        sa.Column('cancellation_reason', sa.Text()),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
    )

    op.create_index(
        'uq_appointments_active_start',
        'appointments',
        ['staff_id', 'appointment_date', 'start_time'],
        unique=True,
        sqlite_where=ACTIVE_ONLY,
        postgresql_where=ACTIVE_ONLY,
    )


def downgrade():
    op.drop_index('uq_appointments_active_start', table_name='appointments')
    op.drop_table('appointments')
    op.drop_table('holidays')
    op.drop_table('working_hours')
    op.drop_table('services')
    op.drop_table('staff_members')
    op.drop_table('users')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        sa.Enum(name='appointment_status').drop(bind, checkfirst=True)
        sa.Enum(name='user_role').drop(bind, checkfirst=True)
