from .inventory import Product, stock_status
from .customers import Customer
from .sales import Sale, PAYMENT_LUNAS, PAYMENT_HUTANG, PAYMENT_STATUSES, SALE_COMMITTED

__all__ = [
    'Product', 'stock_status',
    'Customer',
    'Sale', 'PAYMENT_LUNAS', 'PAYMENT_HUTANG', 'PAYMENT_STATUSES', 'SALE_COMMITTED',
]
