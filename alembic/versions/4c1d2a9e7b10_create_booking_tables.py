"""create booking tables

Revision ID: 4c1d2a9e7b10
Revises:
Create Date: 2026-10-19 10:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c1d2a9e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Weekly schedule, one row per day name
    op.create_table(
        'day_schedules',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('day_of_week', sa.String(10), nullable=False, unique=True),
        sa.Column('is_working', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('time_slots', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )

    # 2. Booking settings singleton
    op.create_table(
        'booking_settings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('settings_type', sa.String(20), nullable=False, unique=True),
        sa.Column('min_advance_booking_hours', sa.Integer(), nullable=False, server_default='24'),
        sa.Column('max_advance_booking_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('is_booking_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )

    # 3. Blocked dates; one record per anchored date
    op.create_table(
        'date_exceptions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('exception_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(255), nullable=False, server_default=''),
        sa.Column('blocked_by', sa.String(100), nullable=False, server_default='admin'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_full_day_blocked', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('blocked_time_slots', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_date_exceptions_exception_date', 'date_exceptions', ['exception_date'], unique=True)
    op.create_index('ix_date_exceptions_is_active', 'date_exceptions', ['is_active'])

    # 4. Appointments (customer booking records)
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('service_id', sa.String(64), nullable=True),
        sa.Column('service_title', sa.String(200), nullable=False),
        sa.Column('appointment_date', sa.Date(), nullable=False),
        sa.Column('appointment_day', sa.String(10), nullable=False),
        sa.Column('appointment_time', sa.String(5), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=False),
        sa.Column('country', sa.String(2), nullable=False, server_default='BE'),
        sa.Column('gender', sa.String(10), nullable=False),
        sa.Column('special_requests', sa.Text(), nullable=False, server_default=''),
        sa.Column('message', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('reminder_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_appointments_appointment_date', 'appointments', ['appointment_date'])
    op.create_index('ix_appointments_email', 'appointments', ['email'])
    op.create_index('ix_appointments_status', 'appointments', ['status'])

    # 5. Slot occupancy; the unique (date, time) pair prevents double booking
    op.create_table(
        'slot_occupancies',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('appointment_id', sa.Uuid(), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('slot_date', sa.Date(), nullable=False),
        sa.Column('time_slot', sa.String(5), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('slot_date', 'time_slot', name='uq_slot_occupancy_date_time')
    )
    op.create_index('ix_slot_occupancies_slot_date', 'slot_occupancies', ['slot_date'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_slot_occupancies_slot_date', table_name='slot_occupancies')
    op.drop_table('slot_occupancies')

    op.drop_index('ix_appointments_status', table_name='appointments')
    op.drop_index('ix_appointments_email', table_name='appointments')
    op.drop_index('ix_appointments_appointment_date', table_name='appointments')
    op.drop_table('appointments')

    op.drop_index('ix_date_exceptions_is_active', table_name='date_exceptions')
    op.drop_index('ix_date_exceptions_exception_date', table_name='date_exceptions')
    op.drop_table('date_exceptions')

    op.drop_table('booking_settings')
    op.drop_table('day_schedules')
