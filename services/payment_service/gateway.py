from typing import Mapping

from shared.config.settings import Settings
from shared.utils.currency import format_money
from . import signature

SUCCESS_STATUS = "success"


class PayUGateway:
    """Redirect-protocol adapter bound to one merchant configuration."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def payment_url(self) -> str:
        return self.settings.payment_url

    @property
    def success_url(self) -> str:
        return f"{self.settings.callback_base_url}/api/checkout/payu-callback/success"

    @property
    def failure_url(self) -> str:
        return f"{self.settings.callback_base_url}/api/checkout/payu-callback/failure"

    def build_payment_params(self, order, txn_id: str) -> dict[str, str]:
        """Parameter set for one payment attempt, taken from the stored order."""
        return {
            "txnid": txn_id,
            "amount": format_money(order.amount_total),
            "productinfo": f"Order {order.order_number}",
            "firstname": order.name.split(" ")[0],
            "email": order.email,
            "phone": order.phone,
            "surl": self.success_url,
            "furl": self.failure_url,
            "udf1": str(order.id),
        }

    def sign(self, params: Mapping[str, str]) -> str:
        return signature.generate_request_hash(
            self.settings.payu_merchant_key, self.settings.payu_merchant_salt, params
        )

    def build_form(self, params: Mapping[str, str], hash_value: str) -> dict[str, str]:
        """Fields the browser POSTs to the hosted payment page."""
        form = {
            "key": self.settings.payu_merchant_key,
            "txnid": params["txnid"],
            "amount": params["amount"],
            "productinfo": params["productinfo"],
            "firstname": params["firstname"],
            "email": params["email"],
            "phone": params["phone"],
            "surl": params["surl"],
            "furl": params["furl"],
            "hash": hash_value,
        }
        for udf in signature.UDF_FIELDS:
            form[udf] = params.get(udf) or ""
        return form

    def verify_callback(self, params: Mapping[str, str]) -> bool:
        return signature.verify_response_hash(
            self.settings.payu_merchant_key, self.settings.payu_merchant_salt, params
        )
