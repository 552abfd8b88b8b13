# Overview: Publish/subscribe channel for committed data changes.
"""
Change notifications for stock displays, debt views and analytics.

Signals are sent only after the database transaction has committed, so a
receiver that re-queries always sees the new state. Receivers get the
sender name plus keyword payloads; they must not raise (blinker does not
isolate receivers, an exception propagates to the writer after the
commit has already happened).

Usage:
    from kasir import events

    @events.sale_committed.connect
    def refresh(sender, sale, **extra):
        ...
"""
from blinker import Namespace

_signals = Namespace()

product_changed = _signals.signal("product-changed")
stock_changed = _signals.signal("stock-changed")
customer_created = _signals.signal("customer-created")
sale_committed = _signals.signal("sale-committed")
sale_edited = _signals.signal("sale-edited")
sale_deleted = _signals.signal("sale-deleted")
sale_paid = _signals.signal("sale-paid")
