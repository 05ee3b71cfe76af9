"""create_logistics_tables

Revision ID: 001_logistics
Revises:
Create Date: 2026-10-19

Creates the marketplace tables the logistics core reads (users, products,
orders with admin assignment) and the scheduling tables it owns
(admin_schedules, deliveries, pickups).

Occupancy is not stored anywhere: it is always counted from the
pickups/deliveries rows for a schedule.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_logistics'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _booking_columns() -> list[sa.Column]:
    return [
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('schedule_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('admin_schedules.schedule_id'), nullable=False),
        sa.Column('order_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('orders.order_id'), nullable=False),
        sa.Column('participant_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('admin_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('products.product_id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('preferred_time', sa.Time(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='buyer'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'buyer', 'seller')", name='chk_user_role'),
    )
    op.create_index('idx_users_role', 'users', ['role'])

    op.create_table(
        'products',
        sa.Column('product_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('seller_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
    )
    op.create_index('idx_products_seller', 'products', ['seller_id'])

    op.create_table(
        'orders',
        sa.Column('order_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('buyer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('seller_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('products.product_id'), nullable=False),
        sa.Column('assigned_admin_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.Column('assigned_by', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='in_progress'),
        *_timestamps(),
    )
    op.create_index('idx_orders_buyer_admin', 'orders', ['buyer_id', 'assigned_admin_id'])
    op.create_index('idx_orders_seller_admin', 'orders', ['seller_id', 'assigned_admin_id'])
    op.create_index('idx_orders_status', 'orders', ['status'])

    op.create_table(
        'admin_schedules',
        sa.Column('schedule_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('admin_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('max_slots', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        *_timestamps(),
        sa.CheckConstraint("kind IN ('pickup', 'delivery')", name='chk_schedule_kind'),
        sa.CheckConstraint('max_slots >= 1', name='chk_schedule_max_slots_positive'),
        sa.CheckConstraint('end_time > start_time', name='chk_schedule_time'),
    )
    op.create_index('idx_schedules_admin_kind_date', 'admin_schedules',
                    ['admin_id', 'kind', 'date'])
    op.create_index('idx_schedules_status', 'admin_schedules', ['status'])

    op.create_table('deliveries', *_booking_columns())
    op.create_index('idx_deliveries_schedule', 'deliveries', ['schedule_id'])
    op.create_index('idx_deliveries_order', 'deliveries', ['order_id'])
    op.create_index('idx_deliveries_admin_status_product', 'deliveries',
                    ['admin_id', 'status', 'product_id'])

    op.create_table(
        'pickups',
        *_booking_columns(),
        sa.Column('delivery_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('deliveries.booking_id'), nullable=True),
    )
    # No unique constraint on order_id: duplicate bookings are a soft check
    op.create_index('idx_pickups_schedule', 'pickups', ['schedule_id'])
    op.create_index('idx_pickups_order', 'pickups', ['order_id'])
    op.create_index('idx_pickups_participant', 'pickups', ['participant_id'])


def downgrade() -> None:
    op.drop_table('pickups')
    op.drop_table('deliveries')
    op.drop_table('admin_schedules')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('users')
