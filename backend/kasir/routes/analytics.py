# Overview: Flask API routes for analytics; parses input and returns JSON responses.

"""
Analytics Routes

Best sellers, most profitable products and window totals.

Query params (all routes):
- window: today | last_7_days | this_month | all_time (default today)
- tz: IANA timezone name (default STORE_TIMEZONE)
- limit: int (optional, top-N routes only)
"""

from flask import Blueprint, request

from ..errors import KasirError, error_body
from ..services import analytics_service


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def _window_args() -> tuple[str, str | None]:
    return request.args.get("window", analytics_service.WINDOW_TODAY), request.args.get("tz")


@analytics_bp.get("/top-quantity")
def top_quantity_route():
    window, tz = _window_args()
    try:
        items = analytics_service.top_by_quantity(window, tz=tz, limit=request.args.get("limit", type=int))
    except KasirError as e:
        return e.to_dict(), e.status_code
    except ValueError as e:
        return error_body("InvalidTimezone", str(e), {"tz": tz}), 400
    return {"window": window, "items": items}


@analytics_bp.get("/top-profit")
def top_profit_route():
    window, tz = _window_args()
    try:
        items = analytics_service.top_by_profit(window, tz=tz, limit=request.args.get("limit", type=int))
    except KasirError as e:
        return e.to_dict(), e.status_code
    except ValueError as e:
        return error_body("InvalidTimezone", str(e), {"tz": tz}), 400
    return {"window": window, "items": items}


@analytics_bp.get("/summary")
def summary_route():
    window, tz = _window_args()
    try:
        return analytics_service.sales_summary(window, tz=tz)
    except KasirError as e:
        return e.to_dict(), e.status_code
    except ValueError as e:
        return error_body("InvalidTimezone", str(e), {"tz": tz}), 400
