"""
Pytest fixtures for Kasir backend tests.

Provides an in-memory database, a test client, and sample products and
customers shaped like the shop's real stock.
"""

import pytest
from kasir import create_app
from kasir.extensions import db
from kasir.services import customer_service, products_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_TIMEZONE': 'Asia/Jakarta',
        'LOW_STOCK_THRESHOLD': 10,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    # Cleanup after test
    db.session.rollback()


@pytest.fixture(scope='function')
def product(db_session):
    """Gudang Garam Merah 12: buy 18.000, sell 20.000, 50 in stock."""
    return products_service.create_product(
        product_id="GGM01",
        name="Gudang Garam Merah 12",
        purchase_price=18000,
        selling_price=20000,
        initial_stock=50,
    )


@pytest.fixture(scope='function')
def other_product(db_session):
    """Kretek 234 16: buy 22.000, sell 25.000, 30 in stock."""
    return products_service.create_product(
        product_id="KRT01",
        name="Kretek 234 16",
        purchase_price=22000,
        selling_price=25000,
        initial_stock=30,
    )


@pytest.fixture(scope='function')
def customer(db_session):
    """A regular who buys on credit."""
    return customer_service.create_customer("Budi")
