"""Gateway models: shops, payments, settings and settlement results.

All monetary values use Decimal for exact arithmetic.

Invariants enforced by these models:
- Payment lifecycle is a strict forward-only state machine
- A payment's amount and shop reference never change after creation
- Result records are frozen once produced
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from paygate.errors import ValidationError


class PaymentStatus(str, enum.Enum):
    """Lifecycle state of a payment.

    State machine:
        ACCEPTED → PROCESSED → COMPLETED → WITHDRAWN
    """
    ACCEPTED = "accepted"
    PROCESSED = "processed"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


# Each state has exactly one successor; WITHDRAWN is terminal.
PAYMENT_TRANSITIONS: Dict[PaymentStatus, frozenset] = {
    PaymentStatus.ACCEPTED: frozenset({PaymentStatus.PROCESSED}),
    PaymentStatus.PROCESSED: frozenset({PaymentStatus.COMPLETED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.WITHDRAWN}),
    PaymentStatus.WITHDRAWN: frozenset(),
}


def is_legal_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in PAYMENT_TRANSITIONS.get(current, frozenset())


@dataclass
class Shop:
    """A registered shop and the payments it has accepted.

    payment_ids grows append-only. last_payout is None until the first
    withdrawal that actually pays something out.
    """
    shop_id: int
    name: str
    commission_c: Decimal
    payment_ids: List[int] = field(default_factory=list)
    last_payout: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.shop_id,
            "name": self.name,
            "commission_c": str(self.commission_c),
            "payments": list(self.payment_ids),
            "last_payout": self.last_payout.isoformat() if self.last_payout else None,
        }


@dataclass
class Payment:
    """A customer payment accepted on behalf of a shop.

    Mutable only through transition_to(); the status never regresses.
    """
    payment_id: int
    shop_id: int
    amount: Decimal
    blocked_amount: Decimal
    status: PaymentStatus = PaymentStatus.ACCEPTED

    def transition_to(self, new_status: PaymentStatus) -> None:
        """Move to the next lifecycle state, rejecting anything else."""
        if not is_legal_transition(self.status, new_status):
            allowed = PAYMENT_TRANSITIONS.get(self.status, frozenset())
            raise ValidationError(
                f"Invalid payment transition: {self.status.value} → {new_status.value}. "
                f"Allowed: {', '.join(s.value for s in allowed) or 'none'}"
            )
        self.status = new_status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.payment_id,
            "shop_id": self.shop_id,
            "amount": str(self.amount),
            "status": self.status.value,
            "blocked_amount": str(self.blocked_amount),
        }


@dataclass(frozen=True)
class SettingsSnapshot:
    """The global commission and blocking values at one point in time."""
    commission_a: Decimal
    commission_b: Decimal
    block_sum: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "commission_a": str(self.commission_a),
            "commission_b": str(self.commission_b),
            "block_sum": str(self.block_sum),
        }


@dataclass(frozen=True)
class TransitionOutcome:
    """What a bulk transition did to one requested payment id.

    previous_status is None when no payment has that id. new_status is
    None when the payment was skipped.
    """
    payment_id: Any
    previous_status: Optional[PaymentStatus]
    new_status: Optional[PaymentStatus]

    @property
    def applied(self) -> bool:
        return self.new_status is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.payment_id,
            "previous_status": self.previous_status.value if self.previous_status else None,
            "new_status": self.new_status.value if self.new_status else None,
            "applied": self.applied,
        }


@dataclass(frozen=True)
class PaidOutPayment:
    """One withdrawn payment and the net amount credited for it."""
    payment_id: int
    amount: Decimal


@dataclass(frozen=True)
class WithdrawalResult:
    """Outcome of a withdrawal for one shop.

    Invariant: total_payment == sum(p.amount for p in payments)
    """
    shop_id: int
    total_payment: Decimal
    payments: Tuple[PaidOutPayment, ...]
    last_payout: Optional[date]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_payment": str(self.total_payment),
            "payments": [
                {"id": p.payment_id, "amount": str(p.amount)} for p in self.payments
            ],
            "last_payout": self.last_payout.isoformat() if self.last_payout else None,
        }
