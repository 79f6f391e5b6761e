"""create events, seats and seat_bookings

Revision ID: 3b7e91c2d4a0
Revises:
Create Date: 2026-10-12 10:21:44.118302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7e91c2d4a0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


booking_status = sa.Enum('booked', name='booking_status')


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('event_time', sa.Time(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('venue', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('event_date', name='events_event_date_key'),
        sa.CheckConstraint('total_seats BETWEEN 1 AND 260', name='chk_event_total_seats'),
    )

    op.create_table(
        'seats',
        sa.Column('id', sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('code', sa.String(3), nullable=False),
        sa.Column('row', sa.String(1), nullable=False),
        sa.Column('column', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.UniqueConstraint('event_id', 'code', name='uq_seat_event_code'),
        sa.CheckConstraint("row BETWEEN 'A' AND 'Z'", name='chk_seat_row_letter'),
        sa.CheckConstraint('"column" BETWEEN 1 AND 10', name='chk_seat_column_range'),
        sa.CheckConstraint('price >= 0', name='chk_seat_price_nonneg'),
    )
    op.create_index('ix_seats_event_id', 'seats', ['event_id'])

    op.create_table(
        'seat_bookings',
        sa.Column('id', sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column('seat_id', sa.Integer(), sa.ForeignKey('seats.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('status', booking_status, nullable=False, server_default='booked'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('seat_id', 'booking_date', name='uq_seat_booking_date'),
    )
    op.create_index('ix_seat_bookings_seat_id', 'seat_bookings', ['seat_id'])
    op.create_index('ix_seat_bookings_event_id', 'seat_bookings', ['event_id'])


def downgrade() -> None:
    op.drop_index('ix_seat_bookings_event_id', table_name='seat_bookings')
    op.drop_index('ix_seat_bookings_seat_id', table_name='seat_bookings')
    op.drop_table('seat_bookings')
    op.drop_index('ix_seats_event_id', table_name='seats')
    op.drop_table('seats')
    op.drop_table('events')
    booking_status.drop(op.get_bind(), checkfirst=True)
