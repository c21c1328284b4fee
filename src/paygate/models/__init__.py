"""Core data models for the payment gateway."""

from paygate.models.gateway import (
    PAYMENT_TRANSITIONS,
    PaidOutPayment,
    Payment,
    PaymentStatus,
    SettingsSnapshot,
    Shop,
    TransitionOutcome,
    WithdrawalResult,
)

__all__ = [
    "PAYMENT_TRANSITIONS",
    "PaidOutPayment",
    "Payment",
    "PaymentStatus",
    "SettingsSnapshot",
    "Shop",
    "TransitionOutcome",
    "WithdrawalResult",
]
