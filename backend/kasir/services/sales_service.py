"""
Sales Service - the sale transaction engine.

A sale intent goes Draft (caller side) -> Validating -> Committed | Rejected.
Committing is ONE database transaction that:

1. resolves or creates the customer (credit sales only)
2. freezes revenue / cost / profit from the product's current prices
3. inserts the sale row (status COMMITTED)
4. decrements product stock through inventory_service.apply_stock_delta

If anything fails partway, run_atomic rolls the whole unit back: nobody
ever observes a sale without its stock decrement or the reverse. Edits and
deletes follow the same rule with the compensating stock delta.
"""
from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..errors import (
    InsufficientStock,
    InvalidPaymentStatus,
    InvalidQuantity,
    MissingCustomer,
    SaleNotFound,
)
from ..extensions import db
from ..models import Customer, Product, Sale, PAYMENT_HUTANG, PAYMENT_LUNAS, PAYMENT_STATUSES, SALE_COMMITTED
from ..validation import ValidationError, coerce_int
from .. import events
from ..time_utils import parse_iso_datetime, resolve_timezone, to_utc_naive
from . import customer_service, inventory_service
from .concurrency import lock_for_update, run_atomic


def _coerce_quantity(value) -> int:
    """Positive whole number of units; anything else is InvalidQuantity."""
    try:
        qty = coerce_int("quantity", value)
    except ValidationError:
        raise InvalidQuantity(value)
    if qty <= 0:
        raise InvalidQuantity(value)
    return qty


def _parse_sold_at(value) -> datetime | None:
    """
    Sale time from the request, as UTC-naive.

    Strings without an offset are wall-clock time at the store
    (STORE_TIMEZONE). Naive datetime objects are taken as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if isinstance(value, str):
        store_tz = resolve_timezone(current_app.config.get("STORE_TIMEZONE", "UTC"))
        try:
            dt = parse_iso_datetime(value, default_tz=store_tz)
        except ValueError:
            raise ValidationError("sold_at must be an ISO-8601 datetime")
        return dt
    raise ValidationError("sold_at must be an ISO-8601 datetime")


def _frozen_totals(product: Product, quantity: int) -> tuple[int, int, int]:
    revenue = product.selling_price * quantity
    cost = product.purchase_price * quantity
    return revenue, cost, revenue - cost


def _locked_sale(sale_id: str) -> Sale:
    sale = (
        lock_for_update(db.session.query(Sale).filter_by(id=sale_id))
        .populate_existing()
        .first()
    )
    if sale is None:
        raise SaleNotFound(sale_id)
    return sale


def get_sale(sale_id: str) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise SaleNotFound(sale_id)
    return sale


def record_sale(
    product_id: str,
    quantity,
    payment_status: str,
    customer_id: str | None = None,
    new_customer_name: str | None = None,
    sold_at=None,
) -> Sale:
    """
    Validate and commit one sale.

    Validation order (first failure wins, nothing is written):
    ProductNotFound -> InvalidQuantity -> InvalidPaymentStatus ->
    MissingCustomer / CustomerNotFound -> InsufficientStock(remaining).

    Cash (Lunas) sales never carry a customer, whatever the caller sent.
    """
    inventory_service.get_product(product_id)
    qty = _coerce_quantity(quantity)

    if payment_status not in PAYMENT_STATUSES:
        raise InvalidPaymentStatus(payment_status)

    new_name = new_customer_name.strip() if isinstance(new_customer_name, str) else None
    if payment_status == PAYMENT_HUTANG:
        if not customer_id and not new_name:
            raise MissingCustomer()
        if customer_id:
            customer_service.get_customer(customer_id)
            new_name = None
        else:
            new_name = customer_service.clean_name(new_name)
    else:
        customer_id = None
        new_name = None

    sold_at_dt = _parse_sold_at(sold_at)

    def _op():
        # Stock is re-read under the row lock, never from the pre-check above
        product = inventory_service.get_product(product_id, lock=True)
        if qty > product.current_stock:
            raise InsufficientStock(
                remaining=product.current_stock, requested=qty, product_id=product_id,
            )

        new_customer = None
        sale_customer_id = customer_id
        if new_name:
            new_customer = customer_service.add_customer(new_name)
            sale_customer_id = new_customer.id

        revenue, cost, profit = _frozen_totals(product, qty)
        sale = Sale(
            product_id=product_id,
            customer_id=sale_customer_id,
            quantity=qty,
            total_revenue=revenue,
            total_cost=cost,
            total_profit=profit,
            payment_status=payment_status,
            status=SALE_COMMITTED,
        )
        if sold_at_dt is not None:
            sale.created_at = sold_at_dt
        db.session.add(sale)
        db.session.flush()

        remaining = inventory_service.apply_stock_delta(product_id, -qty)
        return sale, new_customer, remaining

    sale, new_customer, remaining = run_atomic(_op, operation="record_sale")

    current_app.logger.info(
        "Sale %s committed: product=%s qty=%s status=%s revenue=%s",
        sale.id, product_id, qty, payment_status, sale.total_revenue,
    )
    if new_customer is not None:
        events.customer_created.send("sales", customer_id=new_customer.id, name=new_customer.name)
    events.sale_committed.send("sales", sale=sale)
    events.stock_changed.send("sales", product_id=product_id, current_stock=remaining, delta=-qty)
    return sale


def edit_sale(sale_id: str, product_id: str, quantity) -> Sale:
    """
    Change a sale's product and/or quantity.

    Same product: the quantity difference is taken from (or returned to)
    stock; an increase larger than the remaining stock is rejected.
    Different product: the old product gets its units back and the new
    product must cover the full new quantity.
    Totals are recomputed from the product's prices at edit time.
    """
    get_sale(sale_id)
    inventory_service.get_product(product_id)
    qty = _coerce_quantity(quantity)

    def _op():
        sale = _locked_sale(sale_id)
        old_product_id, old_qty = sale.product_id, sale.quantity

        # Lock in a stable order so two edits cannot deadlock
        locked = {
            pid: inventory_service.get_product(pid, lock=True)
            for pid in sorted({old_product_id, product_id})
        }
        product = locked[product_id]

        changes = []
        if product_id == old_product_id:
            delta = qty - old_qty
            if delta > product.current_stock:
                raise InsufficientStock(
                    remaining=product.current_stock, requested=delta, product_id=product_id,
                )
            if delta:
                changes.append((product_id, -delta, inventory_service.apply_stock_delta(product_id, -delta)))
        else:
            if qty > product.current_stock:
                raise InsufficientStock(
                    remaining=product.current_stock, requested=qty, product_id=product_id,
                )
            changes.append(
                (old_product_id, old_qty, inventory_service.apply_stock_delta(old_product_id, old_qty))
            )
            changes.append((product_id, -qty, inventory_service.apply_stock_delta(product_id, -qty)))

        revenue, cost, profit = _frozen_totals(product, qty)
        sale.product = product
        sale.quantity = qty
        sale.total_revenue = revenue
        sale.total_cost = cost
        sale.total_profit = profit
        db.session.flush()
        return sale, changes

    sale, changes = run_atomic(_op, operation="edit_sale")

    current_app.logger.info("Sale %s edited: product=%s qty=%s", sale.id, product_id, qty)
    events.sale_edited.send("sales", sale=sale)
    for changed_id, delta, remaining in changes:
        events.stock_changed.send("sales", product_id=changed_id, current_stock=remaining, delta=delta)
    return sale


def delete_sale(sale_id: str) -> None:
    """Delete a sale and put its units back into stock, atomically."""
    def _op():
        sale = _locked_sale(sale_id)
        inventory_service.get_product(sale.product_id, lock=True)
        remaining = inventory_service.apply_stock_delta(sale.product_id, sale.quantity)
        snapshot = sale.to_dict()
        db.session.delete(sale)
        db.session.flush()
        return snapshot, remaining

    snapshot, remaining = run_atomic(_op, operation="delete_sale")

    current_app.logger.info(
        "Sale %s deleted: %s unit(s) returned to product %s",
        sale_id, snapshot["quantity"], snapshot["product_id"],
    )
    events.sale_deleted.send("sales", sale=snapshot)
    events.stock_changed.send(
        "sales", product_id=snapshot["product_id"], current_stock=remaining, delta=snapshot["quantity"],
    )


def mark_paid(sale_id: str) -> Sale:
    """
    Hutang -> Lunas. Stock and totals are untouched.

    Already-paid sales are returned unchanged (no error, no event).
    """
    def _op():
        sale = _locked_sale(sale_id)
        if sale.payment_status == PAYMENT_LUNAS:
            return sale, False
        sale.payment_status = PAYMENT_LUNAS
        db.session.flush()
        return sale, True

    sale, changed = run_atomic(_op, operation="mark_paid")
    if changed:
        current_app.logger.info("Sale %s marked paid", sale.id)
        events.sale_paid.send("sales", sale=sale)
    return sale


def list_sales(limit: int | None = None) -> list[dict]:
    """Sale log, newest first, with product and customer names."""
    query = (
        db.session.query(Sale, Product.name.label("product_name"), Customer.name.label("customer_name"))
        .join(Product, Product.id == Sale.product_id)
        .outerjoin(Customer, Customer.id == Sale.customer_id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
    )
    if limit:
        query = query.limit(limit)

    rows = []
    for sale, product_name, customer_name in query.all():
        row = sale.to_dict()
        row["product_name"] = product_name
        row["customer_name"] = customer_name
        rows.append(row)
    return rows


def sale_detail(sale: Sale) -> dict:
    row = sale.to_dict()
    row["product_name"] = sale.product.name if sale.product else None
    row["customer_name"] = sale.customer.name if sale.customer else None
    return row
