# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/kasir/services/inventory_service.py
"""
Kasir Inventory Invariants (authoritative)

Stock model:
- Product.current_stock is the live sellable count. It is read straight
  from the database on every call; nothing caches it.
- current_stock >= 0 always. The database CHECK constraint backs this up,
  but the service never even attempts a write that would break it.
- current_stock may exceed initial_stock (manual restocks).

Single choke point:
- Every stock write (sale commit, sale edit, sale delete, manual add /
  subtract / reset) goes through _write_stock, which issues ONE
  conditional UPDATE:
      UPDATE products SET current_stock = current_stock + :delta
       WHERE id = :id AND current_stock + :delta >= 0
  The sufficiency check and the write are the same statement, so two
  concurrent sales can never both consume the last units.
- _write_stock never commits. Callers wrap it in run_atomic together with
  whatever else must land in the same transaction (e.g. the sale row).
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import func, update

from ..errors import InsufficientStock, InvalidQuantity, ProductNotFound
from ..extensions import db
from ..models import Product
from ..validation import ValidationError, coerce_int
from .. import events
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_atomic

STOCK_UPDATE_MODES = ("add", "subtract", "reset")


def get_product(product_id: str, *, lock: bool = False) -> Product:
    query = db.session.query(Product).filter_by(id=product_id)
    if lock:
        query = lock_for_update(query).populate_existing()
    product = query.first()
    if product is None:
        raise ProductNotFound(product_id)
    return product


def _read_stock(product_id: str) -> int:
    row = db.session.query(Product.current_stock).filter(Product.id == product_id).first()
    if row is None:
        raise ProductNotFound(product_id)
    return int(row[0])


def _expire_cached(product_id: str) -> None:
    key = db.session.identity_key(Product, product_id)
    product = db.session.identity_map.get(key)
    if product is not None:
        db.session.expire(product, ["current_stock", "updated_at"])


def _write_stock(product_id: str, *, delta: int | None = None, value: int | None = None) -> int:
    if (delta is None) == (value is None):
        raise TypeError("exactly one of delta or value is required")

    stmt = update(Product).where(Product.id == product_id)
    if delta is not None:
        stmt = stmt.where(Product.current_stock + delta >= 0).values(
            current_stock=Product.current_stock + delta,
            updated_at=utcnow(),
        )
    else:
        stmt = stmt.values(current_stock=value, updated_at=utcnow())

    result = db.session.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount != 1:
        # Either the product is gone or the balance would go negative
        remaining = _read_stock(product_id)
        current_app.logger.warning(
            "Stock check rejected for product %s: delta=%s remaining=%s",
            product_id, delta, remaining,
        )
        raise InsufficientStock(
            remaining=remaining,
            requested=-delta if delta is not None else None,
            product_id=product_id,
        )

    _expire_cached(product_id)
    return _read_stock(product_id)


def apply_stock_delta(product_id: str, delta: int) -> int:
    """
    Move stock by `delta` inside the caller's transaction (no commit).

    Raises InsufficientStock (with the real remaining count) instead of
    letting the balance go negative.
    """
    return _write_stock(product_id, delta=delta)


def get_stock(product_id: str) -> int:
    """Current stock, read fresh from the database."""
    return _read_stock(product_id)


def _coerce_quantity(value) -> int:
    try:
        return coerce_int("quantity", value)
    except ValidationError:
        raise InvalidQuantity(value)


def adjust_stock(product_id: str, delta) -> int:
    """
    Manual stock correction by a signed amount.

    Fails with InsufficientStock if the result would be negative.
    """
    delta = _coerce_quantity(delta)

    def _op():
        get_product(product_id, lock=True)
        return _write_stock(product_id, delta=delta)

    new_stock = run_atomic(_op, operation="adjust_stock")
    events.stock_changed.send("inventory", product_id=product_id, current_stock=new_stock, delta=delta)
    return new_stock


def set_stock(product_id: str, value) -> int:
    """Overwrite stock with an absolute count (stock-take reset)."""
    value = _coerce_quantity(value)
    if value < 0:
        raise InvalidQuantity(value, "Stok tidak boleh negatif")

    def _op():
        product = get_product(product_id, lock=True)
        previous = product.current_stock
        return previous, _write_stock(product_id, value=value)

    previous, new_stock = run_atomic(_op, operation="set_stock")
    events.stock_changed.send(
        "inventory", product_id=product_id, current_stock=new_stock, delta=new_stock - previous,
    )
    return new_stock


def update_stock(product_id: str, mode: str, quantity) -> int:
    """
    Stock-update screen entry point.

    - add: restock by quantity (> 0)
    - subtract: remove quantity (> 0); rejected if stock would go negative
    - reset: set stock to quantity (>= 0)
    """
    if mode not in STOCK_UPDATE_MODES:
        raise ValidationError(f"mode must be one of {', '.join(STOCK_UPDATE_MODES)}")

    qty = _coerce_quantity(quantity)

    if mode == "reset":
        return set_stock(product_id, qty)

    if qty <= 0:
        raise InvalidQuantity(quantity)

    # Surface ProductNotFound before quantity problems from the UPDATE
    get_product(product_id)
    return adjust_stock(product_id, qty if mode == "add" else -qty)


def inventory_summary(low_threshold: int = 10) -> dict:
    """Product counts per stock status, for the stock overview cards."""
    total = db.session.query(func.count(Product.id)).scalar() or 0
    out_of_stock = (
        db.session.query(func.count(Product.id))
        .filter(Product.current_stock <= 0)
        .scalar()
        or 0
    )
    low_stock = (
        db.session.query(func.count(Product.id))
        .filter(Product.current_stock > 0, Product.current_stock < low_threshold)
        .scalar()
        or 0
    )
    total_units = db.session.query(func.coalesce(func.sum(Product.current_stock), 0)).scalar()
    return {
        "product_count": int(total),
        "total_units": int(total_units or 0),
        "low_threshold": low_threshold,
        "low_stock": int(low_stock),
        "out_of_stock": int(out_of_stock),
    }
