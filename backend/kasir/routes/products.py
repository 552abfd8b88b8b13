# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/kasir/routes/products.py
"""
Product management routes.

Stock is never written here: initial_stock is accepted on create only, and
later stock moves go through /api/inventory.
"""
from flask import Blueprint, current_app, request
from ..errors import KasirError, error_body
from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"id", "name", "purchase_price", "selling_price", "initial_stock"},
    required_on_create={"name", "purchase_price", "selling_price"},
)

PRODUCT_PATCH_POLICY = ModelValidationPolicy(
    writable_fields=set(products_service.PRODUCT_MUTABLE_FIELDS),
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _low_threshold() -> int:
    return current_app.config.get("LOW_STOCK_THRESHOLD", 10)


@products_bp.get("")
def list_products():
    """List all products with their stock status (Habis / Rendah / Normal)."""
    threshold = _low_threshold()
    return {"items": [p.to_dict(threshold) for p in products_service.list_products()]}


@products_bp.post("")
def create_product_route():
    """
    Create a new product.

    Body: name, purchase_price, selling_price (whole Rupiah), optional
    initial_stock (default 0) and optional id (product code, e.g. "GGM01").
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return error_body("ValidationError", str(e)), 400

    try:
        created = products_service.create_product(
            name=patch["name"],
            purchase_price=patch["purchase_price"],
            selling_price=patch["selling_price"],
            initial_stock=patch.get("initial_stock") or 0,
            product_id=patch.get("id"),
        )
    except ConflictError as e:
        return error_body("Conflict", str(e)), 409
    except KasirError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return error_body("InternalError", "Internal server error"), 500

    return created.to_dict(_low_threshold()), 201


@products_bp.get("/<product_id>")
def get_product_route(product_id: str):
    try:
        product = products_service.get_product(product_id)
    except KasirError as e:
        return e.to_dict(), e.status_code
    return product.to_dict(_low_threshold())


@products_bp.patch("/<product_id>")
def update_product_route(product_id: str):
    """Update name and/or prices. Past sales keep their frozen totals."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_PATCH_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return error_body("ValidationError", str(e)), 400

    try:
        updated = products_service.update_product(product_id, patch)
    except KasirError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return error_body("InternalError", "Internal server error"), 500

    return updated.to_dict(_low_threshold()), 200


@products_bp.delete("/<product_id>")
def delete_product_route(product_id: str):
    """Delete a product that has no recorded sales."""
    try:
        products_service.delete_product(product_id)
    except ConflictError as e:
        return error_body("Conflict", str(e)), 409
    except KasirError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return error_body("InternalError", "Internal server error"), 500

    return {"ok": True}, 200
