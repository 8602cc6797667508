import secrets
import time

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _timestamp_part() -> str:
    return _base36(int(time.time() * 1000))


def generate_order_number() -> str:
    """Customer-facing order reference, e.g. ``ORD-MGX3K2Q1-A4F09C``."""
    return f"ORD-{_timestamp_part()}-{secrets.token_hex(3)}".upper()


def generate_txn_id() -> str:
    """Gateway transaction id; the lookup key for callback reconciliation."""
    return f"AW{_timestamp_part()}{secrets.token_hex(4)}".upper()
