from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Total checkouts processed",
    ["status"] # Labels: 'created', 'out_of_stock', 'product_not_found', 'invalid', 'error'
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout (order creation) duration in seconds"
)

ecomm_gateway_initiations_total = Counter(
    "ecomm_gateway_initiations_total",
    "Hosted payment redirects built",
    ["currency"]
)

ecomm_payment_callbacks_total = Counter(
    "ecomm_payment_callbacks_total",
    "Gateway callbacks received",
    ["kind", "outcome"] # kind='success'|'failure', outcome='success'|'failure'|'duplicate'|'unknown'|'error'
)

ecomm_signature_mismatch_total = Counter(
    "ecomm_signature_mismatch_total",
    "Gateway callbacks whose response hash did not verify",
    ["kind"]
)

ecomm_stock_conflicts_total = Counter(
    "ecomm_stock_conflicts_total",
    "Paid orders whose stock could not be decremented"
)
