# Overview: Service-layer operations for concurrency; encapsulates business logic and database work.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import KasirError, PersistenceFailure
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    Stock writes stay safe on SQLite because apply_stock_delta re-checks the
    balance inside its UPDATE statement.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Business errors are never retried.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def run_atomic(func, *, operation: str):
    """
    Run `func` as one all-or-nothing unit and commit it.

    Any exception rolls the whole unit back. Business errors (KasirError)
    propagate unchanged; storage errors are logged and surfaced as
    PersistenceFailure so callers never see driver messages.
    """
    def _op():
        try:
            result = func()
            db.session.commit()
            return result
        except (OperationalError, StaleDataError):
            raise
        except Exception:
            db.session.rollback()
            raise

    try:
        return run_with_retry(_op)
    except KasirError:
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error("%s failed in storage: %s", operation, exc)
        raise PersistenceFailure(operation) from exc
