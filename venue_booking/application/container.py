# venue_booking/application/container.py

from dataclasses import dataclass
import random

from venue_booking.config import Settings
from venue_booking.infrastructure.payment_gateway import (
    SimulatedPaymentGateway,
    WebhookSignatureVerifier,
)
from venue_booking.infrastructure.security import PasswordHasher, TokenCodec


@dataclass(frozen=True)
class ServiceContainer:
    """
    Stateless collaborators shared by every request.
    Built once at startup; request-scoped services are assembled
    from these plus the request's Session.
    """

    settings: Settings
    hasher: PasswordHasher
    tokens: TokenCodec
    gateway: SimulatedPaymentGateway
    webhook_verifier: WebhookSignatureVerifier

    @classmethod
    def build(cls, settings: Settings, rng: random.Random | None = None) -> "ServiceContainer":
        return cls(
            settings=settings,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            tokens=TokenCodec(
                secret=settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
                expire_minutes=settings.jwt_expire_minutes,
            ),
            gateway=SimulatedPaymentGateway(
                payment_success_rate=settings.payment_success_rate,
                refund_success_rate=settings.refund_success_rate,
                rng=rng,
            ),
            webhook_verifier=WebhookSignatureVerifier(
                secret=settings.webhook_secret,
                key_id=settings.razorpay_key_id,
                key_secret=settings.razorpay_key_secret,
            ),
        )
