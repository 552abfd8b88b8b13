# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

# backend/kasir/routes/inventory.py
"""
Inventory routes.

Stock is read live on every call. Manual corrections use the
stock-update endpoint with one of three modes:
- add: restock by quantity
- subtract: remove quantity (never below zero)
- reset: set stock to quantity (stock-take)
"""
from flask import Blueprint, current_app, request

from ..errors import KasirError, error_body
from ..models import stock_status
from ..services import inventory_service
from ..validation import ValidationError

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/summary")
def inventory_summary_route():
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    return inventory_service.inventory_summary(low_threshold=threshold)


@inventory_bp.get("/<product_id>")
def get_stock_route(product_id: str):
    try:
        current_stock = inventory_service.get_stock(product_id)
    except KasirError as e:
        return e.to_dict(), e.status_code

    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    return {
        "product_id": product_id,
        "current_stock": current_stock,
        "stock_status": stock_status(current_stock, threshold),
    }


@inventory_bp.post("/<product_id>/update")
def update_stock_route(product_id: str):
    """
    Body: {"mode": "add" | "subtract" | "reset", "quantity": int}

    409 InsufficientStock if a subtract would take stock below zero.
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return error_body("ValidationError", "Invalid JSON payload"), 400
    mode = payload.get("mode")
    if "quantity" not in payload:
        return error_body("ValidationError", "quantity is required"), 400

    try:
        current_stock = inventory_service.update_stock(product_id, mode, payload["quantity"])
    except ValidationError as e:
        return error_body("ValidationError", str(e)), 400
    except KasirError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update stock")
        return error_body("InternalError", "Internal server error"), 500

    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    return {
        "product_id": product_id,
        "mode": mode,
        "current_stock": current_stock,
        "stock_status": stock_status(current_stock, threshold),
    }, 200
