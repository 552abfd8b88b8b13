# Overview: Flask API routes for customer debt; parses input and returns JSON responses.

from flask import Blueprint, current_app

from ..errors import KasirError, error_body
from ..services import debt_service

debts_bp = Blueprint("debts", __name__, url_prefix="/api/debts")


@debts_bp.get("")
def list_debtors_route():
    """Debtors (highest debt first) and the store-wide outstanding total."""
    return {
        "items": debt_service.list_debtors(),
        "total_outstanding": debt_service.total_outstanding(),
    }


@debts_bp.get("/<customer_id>")
def debt_transactions_route(customer_id: str):
    try:
        items = debt_service.list_debt_transactions(customer_id)
    except KasirError as e:
        return e.to_dict(), e.status_code
    return {
        "customer_id": customer_id,
        "total_debt": sum(item["total_revenue"] for item in items),
        "items": items,
    }


@debts_bp.post("/<customer_id>/settle")
def settle_customer_route(customer_id: str):
    """Mark every unpaid sale of the customer as paid."""
    try:
        settled = debt_service.settle_customer(customer_id)
    except KasirError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to settle customer debt")
        return error_body("InternalError", "Internal server error"), 500

    return {"customer_id": customer_id, "settled": settled}, 200
