"""
PayU request/response hashes.

The gateway recomputes the request hash from the submitted form and signs its
callback with the same fields in reverse order. Both orderings are part of
the external protocol and must match byte for byte, so every value is used
exactly as given: no trimming, no case folding, no amount re-formatting.
"""
import hashlib
import secrets
from typing import Mapping

UDF_FIELDS = ("udf1", "udf2", "udf3", "udf4", "udf5")

# Reserved udf6..udf10 slots, always empty on the request side
_REQUEST_PLACEHOLDERS = ("",) * 5

# Empty block between status and udf5 in the response hash. Its width
# depends on whether the callback carries additionalCharges.
_RESPONSE_PLACEHOLDERS = ("",) * 7
_RESPONSE_PLACEHOLDERS_WITH_CHARGES = ("",) * 5


def _field(params: Mapping[str, str], name: str) -> str:
    value = params.get(name)
    return "" if value is None else str(value)


def request_hash_fields(key: str, salt: str, params: Mapping[str, str]) -> list[str]:
    """key|txnid|amount|productinfo|firstname|email|udf1..udf5|<5 empty>|salt"""
    return [
        key,
        _field(params, "txnid"),
        _field(params, "amount"),
        _field(params, "productinfo"),
        _field(params, "firstname"),
        _field(params, "email"),
        *(_field(params, udf) for udf in UDF_FIELDS),
        *_REQUEST_PLACEHOLDERS,
        salt,
    ]


def response_hash_fields(key: str, salt: str, params: Mapping[str, str]) -> list[str]:
    """salt|status|<empty block>|udf5..udf1|email|firstname|productinfo|amount|txnid|key"""
    if _field(params, "additionalCharges"):
        placeholders = _RESPONSE_PLACEHOLDERS_WITH_CHARGES
    else:
        placeholders = _RESPONSE_PLACEHOLDERS
    return [
        salt,
        _field(params, "status"),
        *placeholders,
        *(_field(params, udf) for udf in reversed(UDF_FIELDS)),
        _field(params, "email"),
        _field(params, "firstname"),
        _field(params, "productinfo"),
        _field(params, "amount"),
        _field(params, "txnid"),
        key,
    ]


def _sha512(fields: list[str]) -> str:
    return hashlib.sha512("|".join(fields).encode("utf-8")).hexdigest()


def generate_request_hash(key: str, salt: str, params: Mapping[str, str]) -> str:
    return _sha512(request_hash_fields(key, salt, params))


def compute_response_hash(key: str, salt: str, params: Mapping[str, str]) -> str:
    return _sha512(response_hash_fields(key, salt, params))


def verify_response_hash(key: str, salt: str, params: Mapping[str, str]) -> bool:
    """
    True when the callback's ``hash`` matches the one we compute. A mismatch
    (tampering, stale credentials) is an ordinary False, never an exception.
    """
    received = _field(params, "hash")
    if not received:
        return False
    computed = compute_response_hash(key, salt, params)
    return secrets.compare_digest(computed.lower().encode(), received.lower().encode())
