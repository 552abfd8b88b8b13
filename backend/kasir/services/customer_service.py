# Overview: Service-layer operations for customers; encapsulates business logic and database work.
"""
Customer directory.

Names are NOT unique and creation never de-duplicates on its own: whether
"Budi" at the counter is the same Budi as last week is the cashier's call.
find_or_create_customer(dedupe=True) is available for callers that want
lookup-then-create.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..errors import CustomerCreationFailed, CustomerNotFound
from ..extensions import db
from ..models import Customer
from ..validation import ValidationError
from .. import events
from .concurrency import run_atomic

MAX_NAME_LENGTH = 255


def clean_name(name) -> str:
    """Stripped customer name; blank, non-text or over-long names are rejected."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name cannot be blank")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"name exceeds max length {MAX_NAME_LENGTH}")
    return name


def add_customer(name: str) -> Customer:
    """
    Stage a new customer in the current transaction (no commit).

    Used by the sale engine so an inline customer lands in the same
    transaction as the credit sale that needs it.
    """
    customer = Customer(name=name)
    db.session.add(customer)
    try:
        db.session.flush()
    except SQLAlchemyError as exc:
        current_app.logger.error("Customer insert failed for %r: %s", name, exc)
        raise CustomerCreationFailed(name) from exc
    return customer


def create_customer(name: str) -> Customer:
    name = clean_name(name)
    customer = run_atomic(lambda: add_customer(name), operation="create_customer")
    events.customer_created.send("customers", customer_id=customer.id, name=customer.name)
    return customer


def get_customer(customer_id: str) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise CustomerNotFound(customer_id)
    return customer


def find_customers_by_name(name: str) -> list[Customer]:
    """Case-insensitive exact-name lookup, oldest first."""
    name = clean_name(name)
    return (
        db.session.query(Customer)
        .filter(func.lower(Customer.name) == name.lower())
        .order_by(Customer.created_at.asc(), Customer.id.asc())
        .all()
    )


def find_or_create_customer(name: str, *, dedupe: bool = False) -> str:
    """
    Return a customer id for `name`.

    dedupe=False (default) always creates a new customer; dedupe=True
    reuses the oldest exact-name match when there is one.
    """
    if dedupe:
        matches = find_customers_by_name(name)
        if matches:
            return matches[0].id
    return create_customer(name).id


def list_customers() -> list[dict]:
    rows = (
        db.session.query(Customer.id, Customer.name)
        .order_by(Customer.name.asc(), Customer.id.asc())
        .all()
    )
    return [{"id": row.id, "name": row.name} for row in rows]
