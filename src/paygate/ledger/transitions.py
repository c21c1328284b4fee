"""Status transitioner — bulk payment state changes.

Applies one lifecycle step to a caller-supplied list of payment ids.
Ids that do not exist, or whose payment is not in the expected state,
are skipped without error and without side effects. Every requested id
gets a TransitionOutcome so the skips are visible to the caller.

The id list itself is validated first: a rejected list fails the whole
request before any payment is touched.
"""

from __future__ import annotations

from typing import Any, List, Sequence

import structlog

from paygate.errors import ValidationError
from paygate.ledger.store import Ledger
from paygate.models.gateway import (
    PaymentStatus,
    TransitionOutcome,
    is_legal_transition,
)
from paygate.validation import validate_payment_ids

log = structlog.get_logger(__name__)


class StatusTransitioner:
    """Moves payments along the lifecycle in bulk.

    Usage:
        transitioner = StatusTransitioner(ledger)
        outcomes = transitioner.process([1, 2, 3])
        outcomes = transitioner.complete([1, 2])
    """

    def __init__(self, ledger: Ledger, strict_ids: bool = True) -> None:
        self._ledger = ledger
        self._strict_ids = strict_ids

    def transition(
        self,
        payment_ids: Sequence[Any],
        from_status: PaymentStatus,
        to_status: PaymentStatus,
    ) -> List[TransitionOutcome]:
        """Move every listed payment in from_status to to_status.

        Raises ValidationError if from_status → to_status is not a
        lifecycle step. Otherwise never raises for individual ids.
        """
        if not is_legal_transition(from_status, to_status):
            raise ValidationError(
                f"Not a lifecycle step: {from_status.value} → {to_status.value}"
            )

        outcomes: List[TransitionOutcome] = []
        for payment_id in payment_ids:
            payment = self._ledger.find_payment(payment_id)
            if payment is None:
                outcomes.append(TransitionOutcome(payment_id, None, None))
                continue
            previous = payment.status
            if previous != from_status:
                outcomes.append(TransitionOutcome(payment.payment_id, previous, None))
                continue
            payment.transition_to(to_status)
            outcomes.append(TransitionOutcome(payment.payment_id, previous, to_status))

        applied = sum(1 for o in outcomes if o.applied)
        log.info(
            "payments_transitioned",
            from_status=from_status.value,
            to_status=to_status.value,
            requested=len(outcomes),
            applied=applied,
            skipped=len(outcomes) - applied,
        )
        return outcomes

    def process(self, payment_ids: Any) -> List[TransitionOutcome]:
        """ACCEPTED → PROCESSED for the listed payments."""
        self._check_ids(payment_ids)
        return self.transition(payment_ids, PaymentStatus.ACCEPTED, PaymentStatus.PROCESSED)

    def complete(self, payment_ids: Any) -> List[TransitionOutcome]:
        """PROCESSED → COMPLETED for the listed payments."""
        self._check_ids(payment_ids)
        return self.transition(payment_ids, PaymentStatus.PROCESSED, PaymentStatus.COMPLETED)

    def _check_ids(self, payment_ids: Any) -> None:
        if not validate_payment_ids(payment_ids, strict=self._strict_ids):
            raise ValidationError(
                "Array contains invalid payment IDs. Check your request data."
            )
