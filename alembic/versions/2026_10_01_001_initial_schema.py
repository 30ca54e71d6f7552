"""Initial schema: tenants, users, permissions, clients, products, quotes, HR, invitations

Quote statuses start as free text; 002 normalizes them.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_schema'
down_revision = None

membership_role = sa.Enum('OWNER', 'ADMIN', 'MEMBER', name='membershiprole')
day_type = sa.Enum('WORKDAY', 'ABSENT', 'DAY_OFF', 'NON_WORKING', 'HOLIDAY', name='daytype')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('auth_provider_id', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(80), nullable=False, index=True),
        sa.Column('slug', sa.String(40), nullable=False, unique=True, index=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'memberships',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('role', membership_role, nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'tenant_id', name='uq_membership_user_tenant'),
    )

    op.create_table(
        'permissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('resource', sa.String(100), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.UniqueConstraint('resource', 'action', name='uq_permission_resource_action'),
    )

    op.create_table(
        'role_permissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('role', sa.String(30), nullable=False, index=True),
        sa.Column('permission_id', sa.Uuid(), sa.ForeignKey('permissions.id'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'role', 'permission_id', name='uq_role_permission'),
    )

    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False, index=True),
        sa.Column('tax_id', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(100), nullable=True),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'client_branches',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'product_templates',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False, index=True),
        sa.Column('attributes', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('sku', sa.String(100), nullable=True, index=True),
        sa.Column('name', sa.String(500), nullable=False, index=True),
        sa.Column('description', sa.String(2000), nullable=True),
        sa.Column('unit', sa.String(50), nullable=True),
        sa.Column('price', sa.Numeric(14, 2), nullable=False),
        sa.Column('cost', sa.Numeric(14, 2), nullable=True),
        sa.Column('tax_rate', sa.Numeric(5, 4), nullable=True),
        sa.Column('price_includes_tax', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stock', sa.Numeric(14, 2), nullable=True),
        sa.Column('min_stock', sa.Numeric(14, 2), nullable=True),
        sa.Column('template_id', sa.Uuid(), sa.ForeignKey('product_templates.id'), nullable=True, index=True),
        sa.Column('attributes', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'quotes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('number', sa.String(30), nullable=True, index=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft', index=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('clients.id'), nullable=True, index=True),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('client_branches.id'), nullable=True),
        sa.Column('branch_name', sa.String(255), nullable=True),
        sa.Column('issue_date', sa.DateTime(), nullable=True),
        sa.Column('due_date', sa.DateTime(), nullable=True, index=True),
        sa.Column('currency', sa.String(10), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('print_notes', sa.Boolean(), nullable=True),
        sa.Column('subtotal', sa.Numeric(16, 2), nullable=True),
        sa.Column('tax_total', sa.Numeric(16, 2), nullable=True),
        sa.Column('discount_total', sa.Numeric(16, 2), nullable=True),
        sa.Column('total', sa.Numeric(16, 2), nullable=True),
        sa.Column('public_id', sa.String(64), nullable=False, unique=True, index=True),
        sa.Column('public_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'sequence', name='uq_quote_tenant_sequence'),
    )

    op.create_table(
        'quote_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('quote_id', sa.Uuid(), sa.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('description', sa.String(2000), nullable=False),
        sa.Column('quantity', sa.Numeric(14, 3), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('discount', sa.Numeric(14, 2), nullable=True),
        sa.Column('tax_rate', sa.Numeric(5, 4), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'quote_additional_charges',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('quote_id', sa.Uuid(), sa.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.String(100), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'quote_status_history',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('quote_id', sa.Uuid(), sa.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('from_status', sa.String(20), nullable=True),
        sa.Column('to_status', sa.String(20), nullable=False),
        sa.Column('reason', sa.String(1000), nullable=True),
        sa.Column('changed_by', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, index=True),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('first_name', sa.String(100), nullable=False, index=True),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('monthly_salary', sa.Numeric(14, 2), nullable=True),
        sa.Column('default_shift_start', sa.String(5), nullable=True),
        sa.Column('default_shift_end', sa.String(5), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'employee_schedules',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('employee_id', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('clock_in', sa.String(5), nullable=True),
        sa.Column('clock_out', sa.String(5), nullable=True),
        sa.Column('day_type', day_type, nullable=False),
        sa.Column('overtime_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'employee_id', 'date', name='uq_schedule_employee_date'),
    )

    op.create_table(
        'employee_advances',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('employee_id', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False, index=True),
        sa.Column('schedule_id', sa.Uuid(), sa.ForeignKey('employee_schedules.id'), nullable=True, index=True),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='PYG'),
        sa.Column('reason', sa.String(500), nullable=True),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'invitations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('role', membership_role, nullable=False),
        sa.Column('token', sa.String(128), nullable=False, unique=True, index=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    for table in (
        'invitations',
        'employee_advances',
        'employee_schedules',
        'employees',
        'quote_status_history',
        'quote_additional_charges',
        'quote_items',
        'quotes',
        'products',
        'product_templates',
        'client_branches',
        'clients',
        'role_permissions',
        'permissions',
        'memberships',
        'tenants',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    day_type.drop(bind, checkfirst=True)
    membership_role.drop(bind, checkfirst=True)
