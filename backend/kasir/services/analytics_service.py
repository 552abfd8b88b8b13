# Overview: Service-layer operations for sales analytics; windowed aggregations over the sale log.

"""
Windows are calendar-aware: "today" starts at local midnight in the store's
timezone, not 24 hours ago. Bounds are computed in that zone and converted
to UTC-naive before filtering, because sales are stored in UTC.

    today        [local midnight, next local midnight)
    last_7_days  [now - 7 days, next local midnight)
    this_month   [first of month 00:00, first of next month 00:00)
    all_time     unbounded

Only COMMITTED sales count. Ties are broken by product id ascending.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from flask import current_app
from sqlalchemy import func

from ..errors import InvalidWindow
from ..extensions import db
from ..models import Product, Sale, SALE_COMMITTED
from ..time_utils import local_midnight, resolve_timezone, to_utc_naive, to_utc_z

WINDOW_TODAY = "today"
WINDOW_LAST_7_DAYS = "last_7_days"
WINDOW_THIS_MONTH = "this_month"
WINDOW_ALL_TIME = "all_time"
WINDOWS = (WINDOW_TODAY, WINDOW_LAST_7_DAYS, WINDOW_THIS_MONTH, WINDOW_ALL_TIME)


def _store_tz(tz):
    if tz is None:
        tz = current_app.config.get("STORE_TIMEZONE", "UTC")
    if isinstance(tz, str):
        return resolve_timezone(tz)
    return tz


def _next_day(midnight: datetime) -> datetime:
    # Adding a day to the date (not timedelta(days=1)) keeps DST days correct
    nxt = midnight.date() + timedelta(days=1)
    return datetime(nxt.year, nxt.month, nxt.day, tzinfo=midnight.tzinfo)


def window_bounds(window: str, *, tz=None, now: datetime | None = None) -> tuple[datetime | None, datetime | None]:
    """
    Return (start, end) as UTC-naive datetimes for the named window.

    start is inclusive, end exclusive; both None for all_time.
    `now` defaults to wall-clock now; a naive `now` is taken as UTC.
    """
    if window not in WINDOWS:
        raise InvalidWindow(window)
    if window == WINDOW_ALL_TIME:
        return None, None

    zone = _store_tz(tz)
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc).astimezone(zone)
    else:
        now = now.astimezone(zone)

    midnight = local_midnight(now)

    if window == WINDOW_TODAY:
        start, end = midnight, _next_day(midnight)
    elif window == WINDOW_LAST_7_DAYS:
        start, end = now - timedelta(days=7), _next_day(midnight)
    else:
        start = datetime(now.year, now.month, 1, tzinfo=zone)
        if now.month == 12:
            end = datetime(now.year + 1, 1, 1, tzinfo=zone)
        else:
            end = datetime(now.year, now.month + 1, 1, tzinfo=zone)

    return to_utc_naive(start), to_utc_naive(end)


def _windowed(query, start: datetime | None, end: datetime | None):
    query = query.filter(Sale.status == SALE_COMMITTED)
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at < end)
    return query


def top_by_quantity(window: str, *, tz=None, now: datetime | None = None, limit: int | None = None) -> list[dict]:
    """Best sellers by units sold within the window."""
    total_quantity = func.sum(Sale.quantity).label("total_quantity")
    query = (
        db.session.query(Product.id, Product.name, total_quantity)
        .join(Sale, Sale.product_id == Product.id)
    )
    query = (
        _windowed(query, *window_bounds(window, tz=tz, now=now))
        .group_by(Product.id, Product.name)
        .order_by(total_quantity.desc(), Product.id.asc())
    )
    if limit:
        query = query.limit(limit)
    return [
        {"product_id": row.id, "name": row.name, "total_quantity": int(row.total_quantity or 0)}
        for row in query.all()
    ]


def top_by_profit(window: str, *, tz=None, now: datetime | None = None, limit: int | None = None) -> list[dict]:
    """Most profitable products within the window."""
    total_profit = func.sum(Sale.total_profit).label("total_profit")
    query = (
        db.session.query(Product.id, Product.name, total_profit)
        .join(Sale, Sale.product_id == Product.id)
    )
    query = (
        _windowed(query, *window_bounds(window, tz=tz, now=now))
        .group_by(Product.id, Product.name)
        .order_by(total_profit.desc(), Product.id.asc())
    )
    if limit:
        query = query.limit(limit)
    return [
        {"product_id": row.id, "name": row.name, "total_profit": int(row.total_profit or 0)}
        for row in query.all()
    ]


def sales_summary(window: str, *, tz=None, now: datetime | None = None) -> dict:
    """Totals for the window (the "today's profit" card)."""
    start, end = window_bounds(window, tz=tz, now=now)
    query = db.session.query(
        func.count(Sale.id).label("sales_count"),
        func.coalesce(func.sum(Sale.quantity), 0).label("total_quantity"),
        func.coalesce(func.sum(Sale.total_revenue), 0).label("total_revenue"),
        func.coalesce(func.sum(Sale.total_cost), 0).label("total_cost"),
        func.coalesce(func.sum(Sale.total_profit), 0).label("total_profit"),
    )
    row = _windowed(query, start, end).one()
    return {
        "window": window,
        "start": to_utc_z(start),
        "end": to_utc_z(end),
        "sales_count": int(row.sales_count or 0),
        "total_quantity": int(row.total_quantity or 0),
        "total_revenue": int(row.total_revenue or 0),
        "total_cost": int(row.total_cost or 0),
        "total_profit": int(row.total_profit or 0),
    }
