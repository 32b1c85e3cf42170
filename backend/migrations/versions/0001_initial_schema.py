"""Initial schema: businesses, tenant entities, settings, sessions, audit log

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

This migration creates:
1. businesses (tenant root, unique slug)
2. staff, services, products, customers, appointments (versioned, PK (business_id, id))
3. transactions (non-versioned, status lattice)
4. tenant_settings (one versioned row per business, JSON sections)
5. session_tokens (hashed bearer tokens)
6. audit_logs (append-only)

The embedded client store builds items 2-4 from the same model metadata,
so any change here must be mirrored in the models.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _tenant_columns():
    return [
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    # ==========================================================================
    # 1. BUSINESSES
    # ==========================================================================
    op.create_table('businesses',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('plan', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('businesses', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_businesses_slug'), ['slug'], unique=True)
        batch_op.create_index(batch_op.f('ix_businesses_status'), ['status'], unique=False)

    # ==========================================================================
    # 2. VERSIONED TENANT ENTITIES
    # ==========================================================================
    op.create_table('staff',
        *_tenant_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('commission_rate_bps', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('username', sa.String(length=64), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('business_id', 'id'),
        sa.UniqueConstraint('business_id', 'username', name='uq_staff_business_username'),
    )
    with op.batch_alter_table('staff', schema=None) as batch_op:
        batch_op.create_index('ix_staff_business_name', ['business_id', 'name'], unique=False)

    op.create_table('services',
        *_tenant_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('business_id', 'id'),
    )
    with op.batch_alter_table('services', schema=None) as batch_op:
        batch_op.create_index('ix_services_business_name', ['business_id', 'name'], unique=False)

    op.create_table('products',
        *_tenant_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=16), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('business_id', 'id'),
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_business_name', ['business_id', 'name'], unique=False)

    op.create_table('customers',
        *_tenant_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('join_date', sa.Date(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('business_id', 'id'),
    )
    with op.batch_alter_table('customers', schema=None) as batch_op:
        batch_op.create_index('ix_customers_business_name', ['business_id', 'name'], unique=False)
        batch_op.create_index('ix_customers_business_phone', ['business_id', 'phone'], unique=False)

    op.create_table('appointments',
        *_tenant_columns(),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=32), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=False),
        sa.Column('staff_id', sa.String(length=64), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('business_id', 'id'),
    )
    with op.batch_alter_table('appointments', schema=None) as batch_op:
        batch_op.create_index('ix_appointments_business_scheduled', ['business_id', 'scheduled_at'], unique=False)
        batch_op.create_index('ix_appointments_business_staff', ['business_id', 'staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_appointments_status'), ['status'], unique=False)

    # ==========================================================================
    # 3. TRANSACTIONS
    # ==========================================================================
    op.create_table('transactions',
        *_tenant_columns(),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('customer_id', sa.String(length=64), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('payment_reference', sa.String(length=128), nullable=True),
        sa.Column('mpesa_phone_number', sa.String(length=32), nullable=True),
        sa.Column('settlement_reference', sa.String(length=128), nullable=True),
        sa.Column('recorded_by', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('business_id', 'id'),
    )
    with op.batch_alter_table('transactions', schema=None) as batch_op:
        batch_op.create_index('ix_transactions_business_timestamp', ['business_id', 'timestamp'], unique=False)
        batch_op.create_index(batch_op.f('ix_transactions_status'), ['status'], unique=False)

    # ==========================================================================
    # 4. TENANT SETTINGS
    # ==========================================================================
    op.create_table('tenant_settings',
        *_tenant_columns(),
        sa.Column('business', sa.JSON(), nullable=False),
        sa.Column('payment', sa.JSON(), nullable=False),
        sa.Column('bible', sa.JSON(), nullable=False),
        sa.Column('role_permissions', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('business_id', 'id'),
        sa.UniqueConstraint('business_id', name='uq_tenant_settings_business'),
    )

    # ==========================================================================
    # 5. SESSION TOKENS
    # ==========================================================================
    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.String(length=64), nullable=False),
        sa.Column('staff_id', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_business_id'), ['business_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_session_tokens_expires_at'), ['expires_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_is_revoked'), ['is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_staff_active', ['business_id', 'staff_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 6. AUDIT LOGS
    # ==========================================================================
    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.String(length=64), nullable=True),
        sa.Column('staff_id', sa.String(length=64), nullable=True),
        sa.Column('staff_name', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('resource', sa.String(length=128), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('severity', sa.String(length=8), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_audit_logs_business_id'), ['business_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_audit_logs_action'), ['action'], unique=False)
        batch_op.create_index(batch_op.f('ix_audit_logs_occurred_at'), ['occurred_at'], unique=False)
        batch_op.create_index('ix_audit_logs_business_occurred', ['business_id', 'occurred_at'], unique=False)


def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('session_tokens')
    op.drop_table('tenant_settings')
    op.drop_table('transactions')
    op.drop_table('appointments')
    op.drop_table('customers')
    op.drop_table('products')
    op.drop_table('services')
    op.drop_table('staff')
    op.drop_table('businesses')
