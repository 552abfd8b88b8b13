# Overview: Pytest coverage for concurrent sales against one product.

"""
Concurrency Tests

Several cashiers selling the same product at once must never oversell:
stock ends at initial minus units actually sold, never below zero, and
every successful sale has exactly one row. Runs against a file-backed
SQLite database so each thread gets its own connection.
"""

import threading

import pytest

from kasir import create_app
from kasir.errors import InsufficientStock, PersistenceFailure
from kasir.extensions import db
from kasir.models import Sale
from kasir.services import inventory_service, products_service, sales_service


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'concurrency.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {"connect_args": {"timeout": 30}},
        'STORE_TIMEZONE': 'Asia/Jakarta',
    })

    with app.app_context():
        db.create_all()
        products_service.create_product(
            product_id="GGM01",
            name="Gudang Garam Merah 12",
            purchase_price=18000,
            selling_price=20000,
            initial_stock=5,
        )
        db.session.remove()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


class TestConcurrentSales:
    """Simultaneous sales of one product."""

    def test_racing_sales_never_oversell(self, file_app):
        workers = 8
        barrier = threading.Barrier(workers)
        results = []
        lock = threading.Lock()

        def worker():
            with file_app.app_context():
                try:
                    barrier.wait()
                    sales_service.record_sale("GGM01", 2, "Lunas")
                    outcome = "ok"
                except InsufficientStock:
                    outcome = "insufficient"
                except PersistenceFailure:
                    outcome = "busy"
                finally:
                    db.session.remove()
                with lock:
                    results.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == workers
        sold = results.count("ok")
        assert 1 <= sold <= 2

        with file_app.app_context():
            stock = inventory_service.get_stock("GGM01")
            assert stock == 5 - 2 * sold
            assert stock >= 0
            assert db.session.query(Sale).count() == sold
            db.session.remove()
