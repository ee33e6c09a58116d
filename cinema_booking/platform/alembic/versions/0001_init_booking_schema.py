"""init_booking_schema

Revision ID: 0001
Revises:
Create Date: 2025-01-10

Schema:
- screen / seat: Physical seat layout per screen (read-only catalog)
- showing: A movie on a screen at a date and time
- profile: Display names, owned by the identity service
- seat_hold: Short-lived per-holder seat leases
- booking / booking_seat: Confirmed bookings and their line items

The partial unique index on booking_seat (showing_id, seat_id) WHERE is_active
guarantees a seat is sold at most once per showing even if the showing lock is bypassed.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables with final schema."""

    # ========== Catalog ==========

    op.create_table(
        'screen',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('theater_name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'seat',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('screen_id', sa.Uuid(), nullable=False),
        sa.Column('row_label', sa.String(length=5), nullable=False),
        sa.Column('seat_number', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('price_multiplier', sa.Numeric(4, 2), nullable=False),
        sa.ForeignKeyConstraint(['screen_id'], ['screen.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'screen_id', 'row_label', 'seat_number', name='uq_seat_screen_position'
        ),
    )
    op.create_index(op.f('ix_seat_screen_id'), 'seat', ['screen_id'])

    op.create_table(
        'showing',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('movie_ref', sa.String(length=255), nullable=False),
        sa.Column('screen_id', sa.Uuid(), nullable=False),
        sa.Column('show_date', sa.Date(), nullable=False),
        sa.Column('show_time', sa.Time(), nullable=False),
        sa.Column('base_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['screen_id'], ['screen.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_showing_screen_id'), 'showing', ['screen_id'])

    op.create_table(
        'profile',
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('user_id'),
    )

    # ========== Seat holds ==========

    op.create_table(
        'seat_hold',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('showing_id', sa.Uuid(), nullable=False),
        sa.Column('seat_id', sa.Uuid(), nullable=False),
        sa.Column('holder_key', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['showing_id'], ['showing.id']),
        sa.ForeignKeyConstraint(['seat_id'], ['seat.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('showing_id', 'seat_id', name='uq_seat_hold_showing_seat'),
    )
    op.create_index('ix_seat_hold_showing_holder', 'seat_hold', ['showing_id', 'holder_key'])
    op.create_index(op.f('ix_seat_hold_expires_at'), 'seat_hold', ['expires_at'])

    # ========== Bookings ==========

    op.create_table(
        'booking',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('guest_name', sa.String(length=255), nullable=True),
        sa.Column('guest_email', sa.String(length=255), nullable=True),
        sa.Column('guest_phone', sa.String(length=50), nullable=True),
        sa.Column('showing_id', sa.Uuid(), nullable=False),
        sa.Column('booking_reference', sa.String(length=32), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('idempotency_key', sa.String(length=255), nullable=True),
        sa.Column('holder_key', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refund_amount', sa.Numeric(10, 2), nullable=True),
        sa.ForeignKeyConstraint(['showing_id'], ['showing.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_reference'),
        sa.UniqueConstraint('idempotency_key'),
    )
    op.create_index(op.f('ix_booking_user_id'), 'booking', ['user_id'])
    op.create_index(op.f('ix_booking_showing_id'), 'booking', ['showing_id'])
    op.create_index(op.f('ix_booking_created_at'), 'booking', ['created_at'])

    op.create_table(
        'booking_seat',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('showing_id', sa.Uuid(), nullable=False),
        sa.Column('seat_id', sa.Uuid(), nullable=False),
        sa.Column('seat_label', sa.String(length=10), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('passenger_name', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['booking_id'], ['booking.id']),
        sa.ForeignKeyConstraint(['showing_id'], ['showing.id']),
        sa.ForeignKeyConstraint(['seat_id'], ['seat.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_booking_seat_booking_id'), 'booking_seat', ['booking_id'])
    op.create_index(
        'uq_booking_seat_active',
        'booking_seat',
        ['showing_id', 'seat_id'],
        unique=True,
        postgresql_where=sa.text('is_active'),
        sqlite_where=sa.text('is_active'),
    )


def downgrade() -> None:
    op.drop_index('uq_booking_seat_active', table_name='booking_seat')
    op.drop_index(op.f('ix_booking_seat_booking_id'), table_name='booking_seat')
    op.drop_table('booking_seat')
    op.drop_index(op.f('ix_booking_created_at'), table_name='booking')
    op.drop_index(op.f('ix_booking_showing_id'), table_name='booking')
    op.drop_index(op.f('ix_booking_user_id'), table_name='booking')
    op.drop_table('booking')
    op.drop_index(op.f('ix_seat_hold_expires_at'), table_name='seat_hold')
    op.drop_index('ix_seat_hold_showing_holder', table_name='seat_hold')
    op.drop_table('seat_hold')
    op.drop_table('profile')
    op.drop_index(op.f('ix_showing_screen_id'), table_name='showing')
    op.drop_table('showing')
    op.drop_index(op.f('ix_seat_screen_id'), table_name='seat')
    op.drop_table('seat')
    op.drop_table('screen')
