# backend/kasir/services/products_service.py
"""
Product management.

Stock is not editable here: initial_stock is taken once at creation (and
seeds current_stock), after that only inventory_service moves stock.
Deleting a product does not reconcile stock, and is refused while sales
still reference it so the sale log and debts stay intact.
"""
from __future__ import annotations

from ..errors import ProductNotFound
from ..extensions import db
from ..models import Product, Sale
from ..validation import ConflictError
from .. import events
from .concurrency import run_atomic

PRODUCT_MUTABLE_FIELDS = {"name", "purchase_price", "selling_price"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products() -> list[Product]:
    return db.session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()


def get_product(product_id: str) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return product


def create_product(
    *,
    name: str,
    purchase_price: int,
    selling_price: int,
    initial_stock: int = 0,
    product_id: str | None = None,
) -> Product:
    """
    Create a product; current_stock starts at initial_stock.

    Raises ConflictError if the caller-chosen id is taken.
    """
    if product_id and db.session.get(Product, product_id) is not None:
        raise ConflictError(f"product id {product_id} already exists")

    def _op():
        product = Product(
            name=name,
            purchase_price=purchase_price,
            selling_price=selling_price,
            initial_stock=initial_stock,
            current_stock=initial_stock,
        )
        if product_id:
            product.id = product_id
        db.session.add(product)
        db.session.flush()
        return product

    product = run_atomic(_op, operation="create_product")
    events.product_changed.send("products", product_id=product.id, action="created")
    return product


def update_product(product_id: str, patch: dict) -> Product:
    """Update name and/or prices. Historical sale totals are untouched."""
    def _op():
        product = get_product(product_id)
        apply_product_patch(product, patch)
        return product

    product = run_atomic(_op, operation="update_product")
    events.product_changed.send("products", product_id=product.id, action="updated")
    return product


def delete_product(product_id: str) -> None:
    def _op():
        product = get_product(product_id)
        sale_count = db.session.query(Sale.id).filter(Sale.product_id == product_id).count()
        if sale_count:
            raise ConflictError(
                f"product {product_id} has {sale_count} recorded sale(s); delete those first"
            )
        db.session.delete(product)

    run_atomic(_op, operation="delete_product")
    events.product_changed.send("products", product_id=product_id, action="deleted")
