# backend/kasir/errors.py
"""
Structured rejections raised by the sale engine and its collaborators.

Every error carries a stable `code` (the name callers switch on), a
human-readable message safe to show at the counter, optional `details`,
and the HTTP status the routes answer with. None of them are fatal to the
process; all of them are raised before (or instead of) a commit, so the
store is left exactly as it was.
"""
from __future__ import annotations


def error_body(code: str, message: str, details: dict | None = None) -> dict:
    """JSON error shape shared by every route."""
    return {"error": code, "message": message, "details": details or {}}


class KasirError(Exception):
    """Base class for user-facing business errors."""
    code = "KasirError"
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return error_body(self.code, self.message, self.details)


class ProductNotFound(KasirError):
    code = "ProductNotFound"
    status_code = 404

    def __init__(self, product_id):
        super().__init__("Produk tidak ditemukan", {"product_id": product_id})


class SaleNotFound(KasirError):
    code = "SaleNotFound"
    status_code = 404

    def __init__(self, sale_id):
        super().__init__("Transaksi tidak ditemukan", {"sale_id": sale_id})


class CustomerNotFound(KasirError):
    code = "CustomerNotFound"
    status_code = 404

    def __init__(self, customer_id):
        super().__init__("Pelanggan tidak ditemukan", {"customer_id": customer_id})


class InvalidQuantity(KasirError):
    code = "InvalidQuantity"

    def __init__(self, value=None, message: str = "Jumlah harus berupa bilangan bulat positif"):
        super().__init__(message, {"quantity": value if isinstance(value, (int, str)) else repr(value)})


class InvalidPaymentStatus(KasirError):
    code = "InvalidPaymentStatus"

    def __init__(self, value):
        super().__init__(
            "Status pembayaran harus 'Lunas' atau 'Hutang'",
            {"payment_status": value if isinstance(value, str) else repr(value)},
        )


class MissingCustomer(KasirError):
    code = "MissingCustomer"

    def __init__(self):
        super().__init__("Pilih pelanggan atau tambah pelanggan baru untuk transaksi hutang")


class InsufficientStock(KasirError):
    code = "InsufficientStock"
    status_code = 409

    def __init__(self, remaining: int, requested: int | None = None, product_id=None):
        details = {"remaining": remaining}
        if requested is not None:
            details["requested"] = requested
        if product_id is not None:
            details["product_id"] = product_id
        super().__init__(f"Stok tidak mencukupi! Stok tersisa: {remaining}", details)
        self.remaining = remaining
        self.requested = requested


class CustomerCreationFailed(KasirError):
    code = "CustomerCreationFailed"
    status_code = 409

    def __init__(self, name: str | None = None):
        super().__init__("Gagal menambahkan pelanggan baru", {"name": name})


class PersistenceFailure(KasirError):
    code = "PersistenceFailure"
    status_code = 503

    def __init__(self, operation: str):
        super().__init__("Gagal menyimpan perubahan, silakan coba lagi", {"operation": operation})


class InvalidWindow(KasirError):
    code = "InvalidWindow"

    def __init__(self, value):
        super().__init__(
            "window must be one of today, last_7_days, this_month, all_time",
            {"window": value if isinstance(value, str) else repr(value)},
        )
