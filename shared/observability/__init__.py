from .setup import setup_observability, configure_logging
from .metrics import (
    ecomm_checkout_total,
    ecomm_checkout_duration_seconds,
    ecomm_gateway_initiations_total,
    ecomm_payment_callbacks_total,
    ecomm_signature_mismatch_total,
    ecomm_stock_conflicts_total,
)
