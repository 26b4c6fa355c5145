"""Initial schema: accounts, sessions, daily configs, settlements

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration creates:
1. users, user_roles, session_tokens (accounts and bearer sessions)
2. daily_configs, custom_products (per-date parameters and ad-hoc stock)
3. settlements, settlement_products, checklists (end-of-shift records)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. ACCOUNTS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table('user_roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'worker')", name='ck_user_roles_role'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_user_roles_user'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('user_roles', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_roles_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_roles_role'), ['role'], unique=False)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_session_tokens_expires_at'), ['expires_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_is_revoked'), ['is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 2. DAILY CONFIGURATION
    # ==========================================================================
    op.create_table('daily_configs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('config_date', sa.Date(), nullable=False),
        sa.Column('base_money', sa.Integer(), nullable=False),
        sa.Column('initial_tokens', sa.Integer(), nullable=False),
        sa.Column('opening_hour', sa.String(length=5), nullable=True),
        sa.Column('closing_hour', sa.String(length=5), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('base_money >= 0', name='ck_daily_configs_base_money'),
        sa.CheckConstraint('initial_tokens >= 0', name='ck_daily_configs_initial_tokens'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('config_date', name='uq_daily_configs_date'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('daily_configs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_daily_configs_config_date'), ['config_date'], unique=False)

    op.create_table('custom_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('config_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_custom_products_quantity'),
        sa.CheckConstraint('unit_price >= 0', name='ck_custom_products_unit_price'),
        sa.ForeignKeyConstraint(['config_id'], ['daily_configs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('custom_products', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_custom_products_config_id'), ['config_id'], unique=False)

    # ==========================================================================
    # 3. SETTLEMENTS
    # ==========================================================================
    op.create_table('settlements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('settlement_date', sa.Date(), nullable=False),
        sa.Column('worker_id', sa.Integer(), nullable=False),
        sa.Column('initial_tokens', sa.Integer(), nullable=False),
        sa.Column('final_tokens', sa.Integer(), nullable=False),
        sa.Column('vr_uses', sa.Integer(), nullable=False),
        sa.Column('arcade_coupons', sa.Integer(), nullable=False),
        sa.Column('vr_coupons', sa.Integer(), nullable=False),
        sa.Column('base_money', sa.Integer(), nullable=False),
        sa.Column('arcade_sales', sa.Integer(), nullable=False),
        sa.Column('vr_sales', sa.Integer(), nullable=False),
        sa.Column('product_sales', sa.Integer(), nullable=False),
        sa.Column('gross_total', sa.Integer(), nullable=False),
        sa.Column('net_profit', sa.Integer(), nullable=False),
        sa.Column('nequi_deposits', sa.Integer(), nullable=False),
        sa.Column('opening_notes', sa.Text(), nullable=True),
        sa.Column('closing_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['worker_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('worker_id', 'settlement_date', name='uq_settlements_worker_date'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('settlements', schema=None) as batch_op:
        batch_op.create_index('ix_settlements_date', ['settlement_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_settlements_worker_id'), ['worker_id'], unique=False)

    op.create_table('settlement_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('settlement_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=128), nullable=False),
        sa.Column('initial_quantity', sa.Integer(), nullable=False),
        sa.Column('final_quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['settlement_id'], ['settlements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('settlement_products', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_settlement_products_settlement_id'), ['settlement_id'], unique=False)

    op.create_table('checklists',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('settlement_id', sa.Integer(), nullable=False),
        sa.Column('machines_disconnected', sa.Boolean(), nullable=False),
        sa.Column('machines_cleaned', sa.Boolean(), nullable=False),
        sa.Column('floor_swept', sa.Boolean(), nullable=False),
        sa.Column('sign_collected', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['settlement_id'], ['settlements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('settlement_id', name='uq_checklists_settlement'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('checklists', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_checklists_settlement_id'), ['settlement_id'], unique=False)


def downgrade():
    # Drop tables in reverse order of creation (respect foreign keys)
    op.drop_table('checklists')
    op.drop_table('settlement_products')
    op.drop_table('settlements')
    op.drop_table('custom_products')
    op.drop_table('daily_configs')
    op.drop_table('session_tokens')
    op.drop_table('user_roles')
    op.drop_table('users')
