"""001 Initial schema - reservations and occupied-day markers

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

- reservations: one row per booking, cancelled rows are kept
- occupied_days: one row per claimed day, the day itself is the primary key
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'reservations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('guest_name', sa.String(200), nullable=False),
        sa.Column('guest_email', sa.String(255), nullable=False),
        sa.Column('check_in_date', sa.Date(), nullable=False),
        sa.Column('check_out_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('cancelled_date', sa.Date(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('check_in_date < check_out_date', name='ck_reservation_dates_ordered'),
    )
    op.create_index('ix_reservation_status', 'reservations', ['status'])
    op.create_index('ix_reservation_dates', 'reservations', ['check_in_date', 'check_out_date'])

    op.create_table(
        'occupied_days',
        sa.Column('day', sa.Date(), primary_key=True),
        sa.Column('reservation_id', sa.String(36),
                  sa.ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_occupied_days_reservation', 'occupied_days', ['reservation_id'])


def downgrade():
    op.drop_index('ix_occupied_days_reservation', table_name='occupied_days')
    op.drop_table('occupied_days')

    op.drop_index('ix_reservation_dates', table_name='reservations')
    op.drop_index('ix_reservation_status', table_name='reservations')
    op.drop_table('reservations')
