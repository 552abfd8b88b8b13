# Overview: Pytest coverage for debt derivation from the sale log.

import pytest

from kasir.errors import CustomerNotFound
from kasir.services import customer_service, debt_service, sales_service


class TestDebtDerivation:
    """Debt is always the sum of revenue over a customer's Hutang sales."""

    def test_debt_equals_sum_of_unpaid_revenue(self, db_session, product, other_product, customer):
        sales_service.record_sale("GGM01", 2, "Hutang", customer_id=customer.id)
        sales_service.record_sale("KRT01", 1, "Hutang", customer_id=customer.id)
        sales_service.record_sale("GGM01", 5, "Lunas")

        debtors = debt_service.list_debtors()
        assert debtors == [
            {"customer_id": customer.id, "name": "Budi", "total_debt": 65000, "transaction_count": 2},
        ]
        assert debt_service.total_outstanding() == 65000

    def test_customers_without_debt_are_omitted(self, db_session, product, customer):
        customer_service.create_customer("Siti")
        sale = sales_service.record_sale("GGM01", 1, "Hutang", customer_id=customer.id)
        sales_service.mark_paid(sale.id)

        assert debt_service.list_debtors() == []
        assert debt_service.total_outstanding() == 0

    def test_mark_paid_reduces_debt(self, db_session, product, customer):
        first = sales_service.record_sale("GGM01", 1, "Hutang", customer_id=customer.id)
        sales_service.record_sale("GGM01", 3, "Hutang", customer_id=customer.id)

        sales_service.mark_paid(first.id)
        assert debt_service.list_debtors()[0]["total_debt"] == 60000

    def test_sorted_by_debt_then_name(self, db_session, product):
        siti = customer_service.create_customer("Siti")
        andi = customer_service.create_customer("Andi")
        budi = customer_service.create_customer("Budi")
        sales_service.record_sale("GGM01", 1, "Hutang", customer_id=siti.id)
        sales_service.record_sale("GGM01", 1, "Hutang", customer_id=andi.id)
        sales_service.record_sale("GGM01", 3, "Hutang", customer_id=budi.id)

        assert [d["name"] for d in debt_service.list_debtors()] == ["Budi", "Andi", "Siti"]

    def test_edit_is_reflected_in_debt(self, db_session, product, customer):
        sale = sales_service.record_sale("GGM01", 1, "Hutang", customer_id=customer.id)
        sales_service.edit_sale(sale.id, "GGM01", 4)
        assert debt_service.total_outstanding() == 80000

    def test_delete_is_reflected_in_debt(self, db_session, product, customer):
        sale = sales_service.record_sale("GGM01", 1, "Hutang", customer_id=customer.id)
        sales_service.delete_sale(sale.id)
        assert debt_service.list_debtors() == []


class TestDebtTransactions:

    def test_unpaid_sales_newest_first(self, db_session, product, customer):
        older = sales_service.record_sale(
            "GGM01", 1, "Hutang", customer_id=customer.id, sold_at="2026-10-01T03:00:00Z",
        )
        newer = sales_service.record_sale(
            "GGM01", 2, "Hutang", customer_id=customer.id, sold_at="2026-10-02T03:00:00Z",
        )
        paid = sales_service.record_sale("GGM01", 1, "Hutang", customer_id=customer.id)
        sales_service.mark_paid(paid.id)

        rows = debt_service.list_debt_transactions(customer.id)
        assert [r["id"] for r in rows] == [newer.id, older.id]
        assert rows[0]["product_name"] == "Gudang Garam Merah 12"

    def test_unknown_customer(self, db_session):
        with pytest.raises(CustomerNotFound):
            debt_service.list_debt_transactions("missing")

    def test_settle_customer_clears_all_debt(self, db_session, product, customer):
        for qty in (1, 2, 3):
            sales_service.record_sale("GGM01", qty, "Hutang", customer_id=customer.id)

        assert debt_service.settle_customer(customer.id) == 3
        assert debt_service.list_debt_transactions(customer.id) == []
        assert debt_service.settle_customer(customer.id) == 0
