"""Initial schema: products, customers, sales

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration creates:
1. products (live stock with non-negative CHECK, optimistic version column)
2. customers (names are not unique)
3. sales (frozen totals, Lunas/Hutang status, restrictive foreign keys)
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
    # 1. PRODUCTS TABLE
    # ==========================================================================
    op.create_table('products',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('purchase_price', sa.Integer(), nullable=False),
        sa.Column('selling_price', sa.Integer(), nullable=False),
        sa.Column('initial_stock', sa.Integer(), nullable=False),
        sa.Column('current_stock', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('current_stock >= 0', name='ck_products_current_stock_nonneg'),
        sa.CheckConstraint('initial_stock >= 0', name='ck_products_initial_stock_nonneg'),
        sa.CheckConstraint('purchase_price >= 0', name='ck_products_purchase_price_nonneg'),
        sa.CheckConstraint('selling_price >= 0', name='ck_products_selling_price_nonneg'),
    )
    op.create_index('ix_products_name', 'products', ['name'])

    # ==========================================================================
    # 2. CUSTOMERS TABLE
    # ==========================================================================
    op.create_table('customers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customers_name', 'customers', ['name'])

    # ==========================================================================
    # 3. SALES TABLE
    # ==========================================================================
    op.create_table('sales',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=64), nullable=False),
        sa.Column('customer_id', sa.String(length=36), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_revenue', sa.Integer(), nullable=False),
        sa.Column('total_cost', sa.Integer(), nullable=False),
        sa.Column('total_profit', sa.Integer(), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity > 0', name='ck_sales_quantity_positive'),
        sa.CheckConstraint("payment_status IN ('Lunas', 'Hutang')", name='ck_sales_payment_status'),
    )
    op.create_index('ix_sales_product_id', 'sales', ['product_id'])
    op.create_index('ix_sales_customer_id', 'sales', ['customer_id'])
    op.create_index('ix_sales_payment_status', 'sales', ['payment_status'])
    op.create_index('ix_sales_created_at', 'sales', ['created_at'])
    op.create_index('ix_sales_customer_payment', 'sales', ['customer_id', 'payment_status'])
    op.create_index('ix_sales_status_created', 'sales', ['status', 'created_at'])


def downgrade():
    op.drop_table('sales')
    op.drop_table('customers')
    op.drop_table('products')
