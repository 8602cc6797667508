from .currency import allocate, convert, format_money, rate_for, to_money
from .identifiers import generate_order_number, generate_txn_id

__all__ = [
    "allocate",
    "convert",
    "format_money",
    "rate_for",
    "to_money",
    "generate_order_number",
    "generate_txn_id",
]
