from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

PAYMENT_LUNAS = "Lunas"
PAYMENT_HUTANG = "Hutang"
PAYMENT_STATUSES = (PAYMENT_LUNAS, PAYMENT_HUTANG)

# Draft/Validating/Rejected live only in the caller; storage only ever sees this
SALE_COMMITTED = "COMMITTED"


class Sale(db.Model):
    """
    One committed sale of a single product.

    Totals are frozen at write time from the product's prices then;
    total_profit = total_revenue - total_cost. payment_status moves only
    Hutang -> Lunas (mark_paid). customer_id is NULL for cash sales.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint(
            "payment_status IN ('Lunas', 'Hutang')",
            name="ck_sales_payment_status",
        ),
        # Debt lookups: customer's outstanding sales
        db.Index("ix_sales_customer_payment", "customer_id", "payment_status"),
        # Analytics windows
        db.Index("ix_sales_status_created", "status", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    product_id = db.Column(
        db.String(64),
        db.ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    customer_id = db.Column(
        db.String(36),
        db.ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    quantity = db.Column(db.Integer, nullable=False)

    total_revenue = db.Column(db.Integer, nullable=False)
    total_cost = db.Column(db.Integer, nullable=False)
    total_profit = db.Column(db.Integer, nullable=False)

    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_LUNAS, index=True)
    status = db.Column(db.String(16), nullable=False, default=SALE_COMMITTED)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    product = db.relationship("Product", backref=db.backref("sales", lazy=True, passive_deletes="all"))
    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True, passive_deletes="all"))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<Sale id={self.id!r} product_id={self.product_id!r} qty={self.quantity} "
            f"status={self.payment_status}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "customer_id": self.customer_id,
            "quantity": self.quantity,
            "total_revenue": self.total_revenue,
            "total_cost": self.total_cost,
            "total_profit": self.total_profit,
            "payment_status": self.payment_status,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
