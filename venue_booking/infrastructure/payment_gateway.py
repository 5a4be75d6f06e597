# venue_booking/infrastructure/payment_gateway.py

from dataclasses import dataclass
from decimal import Decimal
import hashlib
import hmac
import json
import logging
import random
import string
import time

import razorpay

from venue_booking.domain.exceptions import AuthenticationError, PaymentGatewayError
from venue_booking.domain.pricing import PaymentMethod

logger = logging.getLogger(__name__)

TRANSACTION_PREFIXES = {
    PaymentMethod.CARD: "CARD",
    PaymentMethod.BKASH: "BKS",
    PaymentMethod.NAGAD: "NGD",
    PaymentMethod.ROCKET: "RKT",
}
REFUND_PREFIX = "REF"

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class ChargeResult:
    success: bool
    transaction_id: str
    message: str


class SimulatedPaymentGateway:
    """
    Stand-in for the bKash / Nagad / Rocket / card providers.
    Outcomes are drawn from the injected random source so tests can pin them.
    """

    def __init__(
        self,
        payment_success_rate: float = 0.95,
        refund_success_rate: float = 0.9,
        rng: random.Random | None = None,
    ):
        self.payment_success_rate = payment_success_rate
        self.refund_success_rate = refund_success_rate
        self.rng = rng or random.Random()

    def new_transaction_id(self, prefix: str) -> str:
        millis = int(time.time() * 1000)
        suffix = "".join(self.rng.choices(_SUFFIX_ALPHABET, k=6))
        return f"{prefix}{millis}{suffix}"

    def charge_id(self, method: PaymentMethod) -> str:
        return self.new_transaction_id(TRANSACTION_PREFIXES.get(method, "PAY"))

    def charge(self, method: PaymentMethod, amount: Decimal, transaction_id: str | None = None) -> ChargeResult:
        transaction_id = transaction_id or self.charge_id(method)
        success = self.rng.random() < self.payment_success_rate

        if success:
            logger.info("Charge %s approved for %s via %s", transaction_id, amount, method.value)
            return ChargeResult(True, transaction_id, "Payment processed successfully")

        logger.warning("Charge %s declined for %s via %s", transaction_id, amount, method.value)
        return ChargeResult(False, transaction_id, "Payment failed. Please try again.")

    def refund(self, transaction_id: str, amount: Decimal) -> str:
        """Returns the refund transaction id or raises PaymentGatewayError."""
        if self.rng.random() >= self.refund_success_rate:
            logger.warning("Refund for %s rejected by provider", transaction_id)
            raise PaymentGatewayError("Refund processing failed. Please try again later.")

        refund_id = self.new_transaction_id(REFUND_PREFIX)
        logger.info("Refund %s issued for %s (%s)", refund_id, transaction_id, amount)
        return refund_id


def canonical_payload(payload: dict) -> str:
    """JSON body the provider signs: sorted keys, no whitespace, no signature field."""
    unsigned = {key: value for key, value in payload.items() if key != "signature"}
    return json.dumps(unsigned, sort_keys=True, separators=(",", ":"), default=str)


class WebhookSignatureVerifier:
    """HMAC-SHA256 webhook signatures, checked with the razorpay SDK utility."""

    def __init__(self, secret: str, key_id: str, key_secret: str):
        self.secret = secret
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def sign(self, payload: dict) -> str:
        body = canonical_payload(payload)
        return hmac.new(self.secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify(self, payload: dict, signature: str | None) -> None:
        if not signature:
            raise AuthenticationError("Invalid webhook signature")
        try:
            self.client.utility.verify_webhook_signature(
                canonical_payload(payload),
                signature,
                self.secret,
            )
        except razorpay.errors.SignatureVerificationError:
            raise AuthenticationError("Invalid webhook signature")
