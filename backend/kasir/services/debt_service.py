# Overview: Service-layer operations for customer debt; derived from the sale log.

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Customer, Product, Sale, PAYMENT_HUTANG, PAYMENT_LUNAS
from .. import events
from .concurrency import lock_for_update, run_atomic
from .customer_service import get_customer


def list_debtors() -> list[dict]:
    """
    Customers with at least one unpaid (Hutang) sale.

    total_debt is the sum of total_revenue over those sales, recomputed on
    every call. Sorted by total_debt desc, then name, then id.
    """
    total_debt = func.sum(Sale.total_revenue).label("total_debt")
    transaction_count = func.count(Sale.id).label("transaction_count")

    rows = (
        db.session.query(Customer.id, Customer.name, total_debt, transaction_count)
        .join(Sale, Sale.customer_id == Customer.id)
        .filter(Sale.payment_status == PAYMENT_HUTANG)
        .group_by(Customer.id, Customer.name)
        .order_by(total_debt.desc(), Customer.name.asc(), Customer.id.asc())
        .all()
    )
    return [
        {
            "customer_id": row.id,
            "name": row.name,
            "total_debt": int(row.total_debt or 0),
            "transaction_count": int(row.transaction_count or 0),
        }
        for row in rows
    ]


def list_debt_transactions(customer_id: str) -> list[dict]:
    """A customer's unpaid sales, newest first, with product names."""
    get_customer(customer_id)

    rows = (
        db.session.query(Sale, Product.name.label("product_name"))
        .join(Product, Product.id == Sale.product_id)
        .filter(Sale.customer_id == customer_id, Sale.payment_status == PAYMENT_HUTANG)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )
    result = []
    for sale, product_name in rows:
        row = sale.to_dict()
        row["product_name"] = product_name
        result.append(row)
    return result


def total_outstanding() -> int:
    total = (
        db.session.query(func.coalesce(func.sum(Sale.total_revenue), 0))
        .filter(Sale.payment_status == PAYMENT_HUTANG)
        .scalar()
    )
    return int(total or 0)


def settle_customer(customer_id: str) -> int:
    """Mark every Hutang sale of the customer Lunas in one transaction."""
    get_customer(customer_id)

    def _op():
        sales = (
            lock_for_update(
                db.session.query(Sale).filter(
                    Sale.customer_id == customer_id,
                    Sale.payment_status == PAYMENT_HUTANG,
                )
            )
            .populate_existing()
            .order_by(Sale.id.asc())
            .all()
        )
        for sale in sales:
            sale.payment_status = PAYMENT_LUNAS
        db.session.flush()
        return sales

    settled = run_atomic(_op, operation="settle_customer")
    if settled:
        current_app.logger.info("Settled %s sale(s) for customer %s", len(settled), customer_id)
    for sale in settled:
        events.sale_paid.send("debts", sale=sale)
    return len(settled)
