from .inventory import (
    InsufficientStockError,
    deduct_stock,
    deduct_stock_for_order,
    restore_stock,
    restore_stock_for_order,
)

__all__ = [
    "InsufficientStockError",
    "deduct_stock",
    "deduct_stock_for_order",
    "restore_stock",
    "restore_stock_for_order",
]
