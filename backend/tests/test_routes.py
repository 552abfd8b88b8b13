# Overview: Pytest coverage for the JSON API and its error mapping.

"""
API Route Tests

Errors always come back as {"error": <code>, "message": ..., "details": ...}
with 400 for bad input, 404 for unknown ids, 409 for stock conflicts, 503
for storage failures, and a generic 500 for anything unexpected.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from kasir.services import inventory_service, sales_service


class TestHealth:

    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["checks"]["database"]["status"] == "healthy"


class TestProductRoutes:

    def test_create_and_list(self, client, db_session):
        resp = client.post("/api/products", json={
            "id": "SMW01",
            "name": "Sampoerna Mild 16",
            "purchase_price": 25000,
            "selling_price": 28000,
            "initial_stock": 5,
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["current_stock"] == 5
        assert body["stock_status"] == "Rendah"

        items = client.get("/api/products").get_json()["items"]
        assert [p["id"] for p in items] == ["SMW01"]

    def test_create_rejects_fractional_price(self, client, db_session):
        resp = client.post("/api/products", json={"name": "X", "purchase_price": 1.5, "selling_price": 2})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "ValidationError"

    def test_create_requires_fields(self, client, db_session):
        resp = client.post("/api/products", json={"name": "X"})
        assert resp.status_code == 400

    def test_create_duplicate_id(self, client, product):
        resp = client.post("/api/products", json={
            "id": "GGM01", "name": "X", "purchase_price": 1, "selling_price": 2,
        })
        assert resp.status_code == 409

    def test_patch_rejects_stock(self, client, product):
        resp = client.patch("/api/products/GGM01", json={"current_stock": 1})
        assert resp.status_code == 400

    def test_patch_price(self, client, product):
        resp = client.patch("/api/products/GGM01", json={"selling_price": 21000})
        assert resp.status_code == 200
        assert resp.get_json()["selling_price"] == 21000

    def test_get_unknown(self, client, db_session):
        resp = client.get("/api/products/NOPE")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "ProductNotFound"

    def test_delete_with_sales_conflicts(self, client, product):
        sales_service.record_sale("GGM01", 1, "Lunas")
        resp = client.delete("/api/products/GGM01")
        assert resp.status_code == 409


class TestInventoryRoutes:

    def test_update_and_read(self, client, product):
        resp = client.post("/api/inventory/GGM01/update", json={"mode": "subtract", "quantity": 45})
        assert resp.status_code == 200
        assert resp.get_json()["stock_status"] == "Rendah"

        resp = client.get("/api/inventory/GGM01")
        assert resp.get_json()["current_stock"] == 5

    def test_subtract_below_zero(self, client, product):
        resp = client.post("/api/inventory/GGM01/update", json={"mode": "subtract", "quantity": 51})
        assert resp.status_code == 409
        assert resp.get_json()["details"]["remaining"] == 50

    def test_bad_mode(self, client, product):
        resp = client.post("/api/inventory/GGM01/update", json={"mode": "double", "quantity": 1})
        assert resp.status_code == 400

    def test_non_object_body(self, client, product):
        resp = client.post("/api/inventory/GGM01/update", json=[1, 2])
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid JSON payload"
        assert inventory_service.get_stock("GGM01") == 50

    def test_summary(self, client, product):
        body = client.get("/api/inventory/summary").get_json()
        assert body["product_count"] == 1
        assert body["total_units"] == 50


class TestCustomerRoutes:

    def test_create_and_lookup(self, client, db_session):
        resp = client.post("/api/customers", json={"name": "Budi"})
        assert resp.status_code == 201
        customer_id = resp.get_json()["id"]

        items = client.get("/api/customers?name=budi").get_json()["items"]
        assert [c["id"] for c in items] == [customer_id]

    def test_create_with_dedupe(self, client, customer):
        resp = client.post("/api/customers", json={"name": "Budi", "dedupe": True})
        assert resp.get_json()["id"] == customer.id

    def test_blank_name(self, client, db_session):
        resp = client.post("/api/customers", json={"name": " "})
        assert resp.status_code == 400

    def test_non_object_body(self, client, db_session):
        resp = client.post("/api/customers", json="Budi")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "ValidationError"


class TestSaleRoutes:

    def test_record_sale(self, client, product):
        resp = client.post("/api/sales", json={"product_id": "GGM01", "quantity": 2, "payment_status": "Lunas"})
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["total_profit"] == 4000
        assert body["product_name"] == "Gudang Garam Merah 12"
        assert inventory_service.get_stock("GGM01") == 48

    def test_insufficient_stock(self, client, product):
        resp = client.post("/api/sales", json={"product_id": "GGM01", "quantity": 60, "payment_status": "Lunas"})
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["error"] == "InsufficientStock"
        assert body["message"] == "Stok tidak mencukupi! Stok tersisa: 50"
        assert body["details"]["remaining"] == 50

    def test_missing_customer(self, client, product):
        resp = client.post("/api/sales", json={"product_id": "GGM01", "quantity": 1, "payment_status": "Hutang"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "MissingCustomer"

    def test_unknown_product(self, client, db_session):
        resp = client.post("/api/sales", json={"product_id": "NOPE", "quantity": 1, "payment_status": "Lunas"})
        assert resp.status_code == 404

    def test_bad_sold_at(self, client, product):
        resp = client.post("/api/sales", json={
            "product_id": "GGM01", "quantity": 1, "payment_status": "Lunas", "sold_at": "kemarin",
        })
        assert resp.status_code == 400

    def test_naive_sold_at_is_store_local(self, client, product):
        resp = client.post("/api/sales", json={
            "product_id": "GGM01", "quantity": 1, "payment_status": "Lunas", "sold_at": "2026-10-19T08:30:00",
        })
        assert resp.status_code == 201
        assert resp.get_json()["created_at"] == "2026-10-19T01:30:00Z"

    @pytest.mark.parametrize("body", [[1, 2], "GGM01", 42])
    def test_non_object_body(self, client, product, body):
        resp = client.post("/api/sales", json=body)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid JSON payload"
        assert client.get("/api/sales").get_json()["items"] == []

    def test_edit_with_non_object_body(self, client, product):
        sale_id = client.post("/api/sales", json={
            "product_id": "GGM01", "quantity": 2, "payment_status": "Lunas",
        }).get_json()["id"]

        resp = client.patch(f"/api/sales/{sale_id}", json=[5])
        assert resp.status_code == 400
        assert inventory_service.get_stock("GGM01") == 48

    def test_overlong_inline_customer_name(self, client, product):
        resp = client.post("/api/sales", json={
            "product_id": "GGM01", "quantity": 1, "payment_status": "Hutang", "new_customer_name": "X" * 1000,
        })
        assert resp.status_code == 400
        assert inventory_service.get_stock("GGM01") == 50

    def test_persistence_failure_is_503(self, client, product, monkeypatch):
        def boom(product_id, delta):
            raise SQLAlchemyError("database is locked by driver")

        monkeypatch.setattr(inventory_service, "apply_stock_delta", boom)
        resp = client.post("/api/sales", json={"product_id": "GGM01", "quantity": 1, "payment_status": "Lunas"})

        assert resp.status_code == 503
        assert resp.get_json()["error"] == "PersistenceFailure"
        assert "driver" not in resp.get_data(as_text=True)

    def test_unexpected_error_is_generic_500(self, client, product, monkeypatch):
        def boom(**kwargs):
            raise RuntimeError("internal detail")

        monkeypatch.setattr(sales_service, "record_sale", boom)
        resp = client.post("/api/sales", json={"product_id": "GGM01", "quantity": 1, "payment_status": "Lunas"})

        assert resp.status_code == 500
        assert "internal detail" not in resp.get_data(as_text=True)

    def test_edit_delete_and_mark_paid(self, client, product, customer):
        sale_id = client.post("/api/sales", json={
            "product_id": "GGM01", "quantity": 2, "payment_status": "Hutang", "customer_id": customer.id,
        }).get_json()["id"]

        resp = client.patch(f"/api/sales/{sale_id}", json={"quantity": 5})
        assert resp.status_code == 200
        assert resp.get_json()["quantity"] == 5
        assert inventory_service.get_stock("GGM01") == 45

        resp = client.post(f"/api/sales/{sale_id}/mark-paid")
        assert resp.get_json()["payment_status"] == "Lunas"

        resp = client.delete(f"/api/sales/{sale_id}")
        assert resp.status_code == 200
        assert inventory_service.get_stock("GGM01") == 50

        assert client.get(f"/api/sales/{sale_id}").status_code == 404

    def test_list_sales(self, client, product):
        client.post("/api/sales", json={"product_id": "GGM01", "quantity": 1, "payment_status": "Lunas"})
        items = client.get("/api/sales").get_json()["items"]
        assert len(items) == 1


class TestDebtRoutes:

    def test_debts_and_settle(self, client, product, customer):
        for qty in (1, 2):
            client.post("/api/sales", json={
                "product_id": "GGM01", "quantity": qty, "payment_status": "Hutang", "customer_id": customer.id,
            })

        body = client.get("/api/debts").get_json()
        assert body["total_outstanding"] == 60000
        assert body["items"][0]["transaction_count"] == 2

        detail = client.get(f"/api/debts/{customer.id}").get_json()
        assert detail["total_debt"] == 60000

        resp = client.post(f"/api/debts/{customer.id}/settle")
        assert resp.get_json()["settled"] == 2
        assert client.get("/api/debts").get_json()["total_outstanding"] == 0

    def test_unknown_customer(self, client, db_session):
        assert client.get("/api/debts/missing").status_code == 404


class TestAnalyticsRoutes:

    def test_all_time_top_quantity(self, client, product):
        client.post("/api/sales", json={"product_id": "GGM01", "quantity": 3, "payment_status": "Lunas"})
        body = client.get("/api/analytics/top-quantity?window=all_time").get_json()
        assert body["items"] == [{"product_id": "GGM01", "name": "Gudang Garam Merah 12", "total_quantity": 3}]

    def test_today_includes_fresh_sale(self, client, product):
        client.post("/api/sales", json={"product_id": "GGM01", "quantity": 1, "payment_status": "Lunas"})
        body = client.get("/api/analytics/summary?window=today").get_json()
        assert body["sales_count"] == 1
        assert body["total_profit"] == 2000

    def test_unknown_window(self, client, db_session):
        resp = client.get("/api/analytics/top-profit?window=forever")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "InvalidWindow"

    def test_unknown_timezone(self, client, db_session):
        resp = client.get("/api/analytics/summary?window=today&tz=Mars/Olympus")
        assert resp.status_code == 400
