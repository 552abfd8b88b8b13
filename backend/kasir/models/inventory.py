from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

STOCK_OUT = "Habis"
STOCK_LOW = "Rendah"
STOCK_NORMAL = "Normal"


def stock_status(current_stock: int, low_threshold: int = 10) -> str:
    if current_stock <= 0:
        return STOCK_OUT
    if current_stock < low_threshold:
        return STOCK_LOW
    return STOCK_NORMAL


class Product(db.Model):
    """
    Product master data with its live stock count.

    STOCK:
    - current_stock is the authoritative sellable count and can never go
      negative (CHECK constraint + conditional UPDATE in inventory_service).
    - initial_stock is recorded once at creation. current_stock may exceed it
      after manual restocks; that is allowed.
    - Only inventory_service.apply_stock_delta / set_stock write current_stock.

    PRICES:
    - Whole Rupiah integers. Sales copy them into frozen totals, so editing
      a price never changes historical sales.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("current_stock >= 0", name="ck_products_current_stock_nonneg"),
        db.CheckConstraint("initial_stock >= 0", name="ck_products_initial_stock_nonneg"),
        db.CheckConstraint("purchase_price >= 0", name="ck_products_purchase_price_nonneg"),
        db.CheckConstraint("selling_price >= 0", name="ck_products_selling_price_nonneg"),
        db.Index("ix_products_name", "name"),
    )

    # Stable product code (e.g. "GGM01"); generated when the caller has none
    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)

    purchase_price = db.Column(db.Integer, nullable=False, default=0)
    selling_price = db.Column(db.Integer, nullable=False, default=0)

    initial_stock = db.Column(db.Integer, nullable=False, default=0)
    current_stock = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r} stock={self.current_stock}>"

    def to_dict(self, low_threshold: int = 10) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "purchase_price": self.purchase_price,
            "selling_price": self.selling_price,
            "initial_stock": self.initial_stock,
            "current_stock": self.current_stock,
            "stock_status": stock_status(self.current_stock, low_threshold),
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
