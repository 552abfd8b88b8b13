# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/kasir/routes/sales.py
"""
Sale routes.

POST /api/sales runs the whole sale transition (validate, freeze totals,
insert, decrement stock, attach or create the customer) as one unit. A
rejection comes back as {"error": <code>, "message": ..., "details": ...}
and leaves nothing behind.
"""
from flask import Blueprint, current_app, request

from ..errors import KasirError, error_body
from ..services import sales_service
from ..validation import ValidationError

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _kasir_error(e: KasirError):
    return e.to_dict(), e.status_code


@sales_bp.get("")
def list_sales_route():
    """
    Sale log, newest first.

    Query params:
    - limit: int (optional)
    """
    limit = request.args.get("limit", type=int)
    if limit is not None and limit <= 0:
        return error_body("ValidationError", "limit must be positive"), 400
    return {"items": sales_service.list_sales(limit=limit)}


@sales_bp.post("")
def record_sale_route():
    """
    Body:
    - product_id: str
    - quantity: int > 0
    - payment_status: "Lunas" | "Hutang"
    - customer_id: str (Hutang, existing customer)
    - new_customer_name: str (Hutang, create inline)
    - sold_at: ISO-8601 datetime (optional, defaults to now); without an
      offset it is read as store-local time (STORE_TIMEZONE)
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return error_body("ValidationError", "Invalid JSON payload"), 400

    try:
        sale = sales_service.record_sale(
            product_id=payload.get("product_id"),
            quantity=payload.get("quantity"),
            payment_status=payload.get("payment_status"),
            customer_id=payload.get("customer_id"),
            new_customer_name=payload.get("new_customer_name"),
            sold_at=payload.get("sold_at"),
        )
    except ValidationError as e:
        return error_body("ValidationError", str(e)), 400
    except KasirError as e:
        return _kasir_error(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return error_body("InternalError", "Internal server error"), 500

    return sales_service.sale_detail(sale), 201


@sales_bp.get("/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        sale = sales_service.get_sale(sale_id)
    except KasirError as e:
        return _kasir_error(e)
    return sales_service.sale_detail(sale)


@sales_bp.patch("/<sale_id>")
def edit_sale_route(sale_id: str):
    """
    Body: {"product_id": str (optional, defaults to the current product),
           "quantity": int > 0}
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return error_body("ValidationError", "Invalid JSON payload"), 400

    try:
        product_id = payload.get("product_id") or sales_service.get_sale(sale_id).product_id
        sale = sales_service.edit_sale(sale_id, product_id, payload.get("quantity"))
    except KasirError as e:
        return _kasir_error(e)
    except Exception:
        current_app.logger.exception("Failed to edit sale")
        return error_body("InternalError", "Internal server error"), 500

    return sales_service.sale_detail(sale), 200


@sales_bp.delete("/<sale_id>")
def delete_sale_route(sale_id: str):
    """Delete the sale and return its units to stock."""
    try:
        sales_service.delete_sale(sale_id)
    except KasirError as e:
        return _kasir_error(e)
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return error_body("InternalError", "Internal server error"), 500

    return {"ok": True, "deleted": sale_id}, 200


@sales_bp.post("/<sale_id>/mark-paid")
def mark_paid_route(sale_id: str):
    try:
        sale = sales_service.mark_paid(sale_id)
    except KasirError as e:
        return _kasir_error(e)
    except Exception:
        current_app.logger.exception("Failed to mark sale paid")
        return error_body("InternalError", "Internal server error"), 500

    return sales_service.sale_detail(sale), 200
