# Overview: Flask CLI command groups for bootstrap, seeding, and inspection.

# backend/kasir/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Add the sample cigarette products (GGM01, KRT01, SMW01) if missing.
#
# Inspection:
# - python -m flask products list
#   List products with stock and stock status.
# - python -m flask debts list
#   List customers with outstanding debt and the store-wide total.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .services import debt_service, products_service

SEED_PRODUCTS = [
    # (id, name, purchase_price, selling_price, initial_stock)
    ("GGM01", "Gudang Garam Merah 12", 18000, 20000, 50),
    ("KRT01", "Kretek 234 16", 22000, 25000, 30),
    ("SMW01", "Sampoerna Mild 16", 25000, 28000, 40),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create all tables that do not exist yet."""
    click.echo("START Initializing Kasir database...")
    db.create_all()
    click.echo("PASS Tables ready: products, customers, sales")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' for sample data.")


@system_group.command('seed')
@with_appcontext
def seed_products():
    """Add sample products; existing ids are left untouched."""
    db.create_all()
    created = 0
    for product_id, name, purchase_price, selling_price, initial_stock in SEED_PRODUCTS:
        if db.session.get(Product, product_id) is not None:
            click.echo(f"WARN  Product '{product_id}' already exists, skipping...")
            continue
        products_service.create_product(
            product_id=product_id,
            name=name,
            purchase_price=purchase_price,
            selling_price=selling_price,
            initial_stock=initial_stock,
        )
        created += 1
        click.echo(f"PASS Created product: {product_id} {name} (stock {initial_stock})")

    click.echo(f"DONE Seeded {created} product(s)")


@click.group('products')
def products_group():
    """Product inspection commands."""


@products_group.command('list')
@with_appcontext
def list_products():
    """List all products with stock status."""
    products = products_service.list_products()

    if not products:
        click.echo("No products found.")
        return

    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<10} {'Name':<30} {'Buy':>10} {'Sell':>10} {'Stock':>8} {'Status'}")
    click.echo("="*90)

    for p in products:
        row = p.to_dict(threshold)
        click.echo(
            f"{row['id']:<10} {row['name'][:30]:<30} {row['purchase_price']:>10} "
            f"{row['selling_price']:>10} {row['current_stock']:>8} {row['stock_status']}"
        )

    click.echo("="*90)
    click.echo(f"Total: {len(products)} product(s)\n")


@click.group('debts')
def debts_group():
    """Customer debt inspection commands."""


@debts_group.command('list')
@with_appcontext
def list_debts():
    """List customers with unpaid (Hutang) sales."""
    debtors = debt_service.list_debtors()

    if not debtors:
        click.echo("No outstanding debt.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'Customer':<30} {'Transactions':>14} {'Total debt':>14}")
    click.echo("="*70)

    for d in debtors:
        click.echo(f"{d['name'][:30]:<30} {d['transaction_count']:>14} {d['total_debt']:>14}")

    click.echo("="*70)
    click.echo(f"Total outstanding: {debt_service.total_outstanding()}\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(products_group)
    app.cli.add_command(debts_group)
