# Overview: Flask API routes for customer operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, request

from ..errors import KasirError, error_body
from ..services import customer_service
from ..validation import ValidationError

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def list_customers_route():
    """
    List customers for the credit-sale picker.

    Query params:
    - name: str (optional) - case-insensitive exact-name lookup, oldest first
    """
    name = request.args.get("name")
    if name is None:
        return {"items": customer_service.list_customers()}

    try:
        matches = customer_service.find_customers_by_name(name)
    except ValidationError as e:
        return error_body("ValidationError", str(e)), 400
    return {"items": [c.to_dict() for c in matches]}


@customers_bp.post("")
def create_customer_route():
    """
    Body: {"name": str, "dedupe": bool (optional)}

    Names are not unique; with dedupe=true an existing exact-name customer
    is returned instead of creating another one.
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return error_body("ValidationError", "Invalid JSON payload"), 400
    dedupe = payload.get("dedupe") is True

    try:
        customer_id = customer_service.find_or_create_customer(payload.get("name"), dedupe=dedupe)
        customer = customer_service.get_customer(customer_id)
    except ValidationError as e:
        return error_body("ValidationError", str(e)), 400
    except KasirError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return error_body("InternalError", "Internal server error"), 500

    return customer.to_dict(), 201
