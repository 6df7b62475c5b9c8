"""create marketplace tables

Revision ID: 0001_create_marketplace_tables
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_create_marketplace_tables'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated=True):
    columns = [sa.Column('created_at', sa.DateTime(), nullable=False)]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(), nullable=False)
        )
    return columns


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30)),
        sa.Column('full_name', sa.String(200)),
        sa.Column('role', sa.String(30), nullable=False, server_default='customer'),
        sa.Column('address', sa.Text()),
        sa.Column('loyalty_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reward_tier', sa.String(20), nullable=False, server_default='bronze'),
        sa.Column('streak_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_order_date', sa.DateTime()),
        *_timestamps(updated=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_role_id', 'users', ['role', 'id'])

    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('phone', sa.String(30)),
        sa.Column('image_url', sa.String(500)),
        sa.Column('cuisine_types', sa.String(300)),
        sa.Column('price_for_two', sa.Numeric(10, 2)),
        sa.Column('rating', sa.Numeric(3, 1)),
        sa.Column('delivery_time', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('delivery_time >= 0', name='delivery_time_non_negative'),
    )
    op.create_index('ix_restaurants_id', 'restaurants', ['id'])
    op.create_index('ix_restaurants_owner_id', 'restaurants', ['owner_id'])

    op.create_table(
        'menu_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('image_url', sa.String(500)),
        sa.Column('is_veg', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='menu_item_price_non_negative'),
    )
    op.create_index('ix_menu_items_id', 'menu_items', ['id'])
    op.create_index('ix_menu_items_restaurant_id', 'menu_items', ['restaurant_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('status', sa.String(30), nullable=False, server_default='placed'),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_address', sa.Text(), nullable=False),
        sa.Column('delivery_partner_id', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('estimated_delivery_time', sa.DateTime()),
        *_timestamps(),
        sa.CheckConstraint('amount >= 0', name='order_amount_non_negative'),
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_restaurant_id', 'orders', ['restaurant_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_delivery_partner_id', 'orders', ['delivery_partner_id'])
    op.create_index('ix_orders_restaurant_status', 'orders', ['restaurant_id', 'status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('menu_item_id', sa.Integer(), sa.ForeignKey('menu_items.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='order_item_quantity_positive'),
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_menu_item_id', 'order_items', ['menu_item_id'])

    op.create_table(
        'loyalty_activities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id')),
        *_timestamps(updated=False),
    )
    op.create_index('ix_loyalty_activities_id', 'loyalty_activities', ['id'])
    op.create_index('ix_loyalty_activities_user_id', 'loyalty_activities', ['user_id'])
    op.create_index('ix_loyalty_activities_action', 'loyalty_activities', ['action'])
    op.create_index('ix_loyalty_activities_order_id', 'loyalty_activities', ['order_id'])
    op.create_index('ix_loyalty_activities_user_created', 'loyalty_activities', ['user_id', 'created_at'])

    op.create_table(
        'rewards',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('points_cost', sa.Integer(), nullable=False),
        sa.Column('discount_amount', sa.Numeric(10, 2)),
        sa.Column('discount_percentage', sa.Integer()),
        sa.Column('valid_for_days', sa.Integer()),
        sa.Column('minimum_tier', sa.String(20), nullable=False, server_default='bronze'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('image_url', sa.String(500)),
        *_timestamps(),
        sa.CheckConstraint('points_cost >= 0', name='reward_points_cost_non_negative'),
        sa.CheckConstraint('valid_for_days > 0 OR valid_for_days IS NULL', name='reward_valid_days_positive'),
        sa.CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100 OR discount_percentage IS NULL',
            name='reward_percentage_valid_range',
        ),
    )
    op.create_index('ix_rewards_id', 'rewards', ['id'])
    op.create_index('ix_rewards_minimum_tier', 'rewards', ['minimum_tier'])
    op.create_index('ix_rewards_is_active', 'rewards', ['is_active'])

    op.create_table(
        'user_rewards',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('reward_id', sa.Integer(), sa.ForeignKey('rewards.id'), nullable=False),
        sa.Column('code', sa.String(8), nullable=False),
        sa.Column('redeemed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime()),
        sa.Column('redeemed_at', sa.DateTime()),
        *_timestamps(updated=False),
    )
    op.create_index('ix_user_rewards_id', 'user_rewards', ['id'])
    op.create_index('ix_user_rewards_user_id', 'user_rewards', ['user_id'])
    op.create_index('ix_user_rewards_reward_id', 'user_rewards', ['reward_id'])
    op.create_index('ix_user_rewards_code', 'user_rewards', ['code'], unique=True)
    op.create_index('ix_user_rewards_user_redeemed', 'user_rewards', ['user_id', 'redeemed'])

    op.create_table(
        'challenges',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('target_count', sa.Integer(), nullable=False),
        sa.Column('action_type', sa.String(30), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('minimum_tier', sa.String(20), nullable=False, server_default='bronze'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('image_url', sa.String(500)),
        *_timestamps(),
        sa.CheckConstraint('target_count > 0', name='challenge_target_positive'),
        sa.CheckConstraint('points >= 0', name='challenge_points_non_negative'),
        sa.CheckConstraint('end_date >= start_date', name='challenge_window_ordered'),
    )
    op.create_index('ix_challenges_id', 'challenges', ['id'])
    op.create_index('ix_challenges_minimum_tier', 'challenges', ['minimum_tier'])
    op.create_index('ix_challenges_is_active', 'challenges', ['is_active'])

    op.create_table(
        'user_challenges',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('challenge_id', sa.Integer(), sa.ForeignKey('challenges.id'), nullable=False),
        sa.Column('current_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime()),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'challenge_id', name='uq_user_challenge'),
        sa.CheckConstraint('current_count >= 0', name='user_challenge_count_non_negative'),
    )
    op.create_index('ix_user_challenges_id', 'user_challenges', ['id'])
    op.create_index('ix_user_challenges_user_id', 'user_challenges', ['user_id'])
    op.create_index('ix_user_challenges_challenge_id', 'user_challenges', ['challenge_id'])


def downgrade():
    op.drop_table('user_challenges')
    op.drop_table('challenges')
    op.drop_table('user_rewards')
    op.drop_table('rewards')
    op.drop_table('loyalty_activities')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('menu_items')
    op.drop_table('restaurants')
    op.drop_table('users')
