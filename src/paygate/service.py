"""Gateway service — unified facade for the payment gateway core.

This is the contract the transport layer calls into. It owns one
instance of every subsystem:
- Settings (global commissions, blocked percentage)
- Ledger (shops and payments)
- Status transitioner (process / complete)
- Settlement engine (withdraw)
- Audit event log

All operations produce typed results. Classified failures
(validation, not_found, cooldown) come back as failed results; any
other exception propagates. Each operation runs inside one lock, so
the service may be shared by a multi-threaded host.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog

from paygate.config import GatewayConfig
from paygate.errors import GatewayError
from paygate.ledger.settings import GatewaySettings
from paygate.ledger.settlement import SettlementEngine
from paygate.ledger.store import Ledger
from paygate.ledger.transitions import StatusTransitioner
from paygate.models.gateway import PaymentStatus, TransitionOutcome
from paygate.persistence.event_log import EventKind, EventLog, EventRecord

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    error_kind: Optional[str] = None


class GatewayService:
    """Payment gateway facade.

    Usage:
        service = GatewayService()
        service.update_settings(1, 2, 10)
        shop_id = service.register_shop("Coffee Corner", 5).data["shop_id"]
        payment_id = service.accept_payment(shop_id, 100).data["payment_id"]
        service.process_payments([payment_id])
        service.complete_payments([payment_id])
        result = service.withdraw(shop_id)
    """

    def __init__(self, config: Optional[GatewayConfig] = None) -> None:
        self._config = config or GatewayConfig()
        self._settings = GatewaySettings(
            commission_a=self._config.commission_a,
            commission_b=self._config.commission_b,
            block_sum=self._config.block_sum,
        )
        self._ledger = Ledger(self._settings)
        self._transitioner = StatusTransitioner(
            self._ledger, strict_ids=self._config.strict_payment_ids,
        )
        self._settlement = SettlementEngine(self._ledger, self._settings)
        self._event_log = EventLog()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def update_settings(
        self, commission_a: Any, commission_b: Any, block_sum: Any,
    ) -> ServiceResult:
        """Replace the global commissions and blocked percentage."""
        def _run() -> ServiceResult:
            snapshot = self._settings.update(commission_a, commission_b, block_sum)
            data = snapshot.to_dict()
            self._event_log.record(EventKind.SETTINGS_UPDATED, dict(data))
            return ServiceResult(success=True, data=data)

        return self._guarded("update_settings", _run)

    def register_shop(self, name: Any, commission_c: Any) -> ServiceResult:
        """Register a shop with its own percentage commission."""
        def _run() -> ServiceResult:
            shop = self._ledger.register_shop(name, commission_c)
            self._event_log.record(
                EventKind.SHOP_REGISTERED,
                {"shop_id": shop.shop_id, "commission_c": str(shop.commission_c)},
            )
            return ServiceResult(success=True, data={"shop_id": shop.shop_id})

        return self._guarded("register_shop", _run)

    def accept_payment(self, shop_id: Any, amount: Any) -> ServiceResult:
        """Accept a customer payment for a shop."""
        def _run() -> ServiceResult:
            payment = self._ledger.accept_payment(shop_id, amount)
            self._event_log.record(EventKind.PAYMENT_ACCEPTED, payment.to_dict())
            return ServiceResult(success=True, data={"payment_id": payment.payment_id})

        return self._guarded("accept_payment", _run)

    def process_payments(self, payment_ids: Any) -> ServiceResult:
        """Move accepted payments to processed."""
        def _run() -> ServiceResult:
            outcomes = self._transitioner.process(payment_ids)
            return self._transition_result(
                "Payments processed", EventKind.PAYMENTS_PROCESSED, outcomes,
            )

        return self._guarded("process_payments", _run)

    def complete_payments(self, payment_ids: Any) -> ServiceResult:
        """Move processed payments to completed."""
        def _run() -> ServiceResult:
            outcomes = self._transitioner.complete(payment_ids)
            return self._transition_result(
                "Payments completed", EventKind.PAYMENTS_COMPLETED, outcomes,
            )

        return self._guarded("complete_payments", _run)

    def withdraw(self, shop_id: Any) -> ServiceResult:
        """Pay out a shop's completed payments net of commissions."""
        def _run() -> ServiceResult:
            result = self._settlement.withdraw(shop_id)
            data = result.to_dict()
            if result.payments:
                self._event_log.record(
                    EventKind.WITHDRAWAL_COMPLETED, {"shop_id": result.shop_id, **data},
                )
            return ServiceResult(success=True, data=data)

        return self._guarded("withdraw", _run)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_shop(self, shop_id: Any) -> Optional[dict[str, Any]]:
        """Snapshot of one shop, or None if it does not exist."""
        with self._lock:
            shop = self._ledger.find_shop(shop_id)
            return shop.to_dict() if shop is not None else None

    def get_payment(self, payment_id: Any) -> Optional[dict[str, Any]]:
        """Snapshot of one payment, or None if it does not exist."""
        with self._lock:
            payment = self._ledger.find_payment(payment_id)
            return payment.to_dict() if payment is not None else None

    def list_payments(self) -> list[dict[str, Any]]:
        """Snapshot of every payment, in id order."""
        with self._lock:
            return [p.to_dict() for p in self._ledger.payments_snapshot()]

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        return self._event_log.events(kind)

    def status(self) -> dict[str, Any]:
        """Return a gateway-wide status summary."""
        with self._lock:
            by_status = {s.value: 0 for s in PaymentStatus}
            for payment in self._ledger.payments_snapshot():
                by_status[payment.status.value] += 1
            return {
                "shops": self._ledger.shop_count,
                "payments": {
                    "total": self._ledger.payment_count,
                    "by_status": by_status,
                },
                "settings": self._settings.snapshot().to_dict(),
                "strict_payment_ids": self._config.strict_payment_ids,
                "events": self._event_log.count,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition_result(
        self,
        message: str,
        kind: EventKind,
        outcomes: list[TransitionOutcome],
    ) -> ServiceResult:
        applied = [o.payment_id for o in outcomes if o.applied]
        if applied:
            self._event_log.record(kind, {"payment_ids": applied})
        return ServiceResult(
            success=True,
            data={
                "message": message,
                "payments": [p.to_dict() for p in self._ledger.payments_snapshot()],
                "outcomes": [o.to_dict() for o in outcomes],
            },
        )

    def _guarded(self, intent: str, operation: Callable[[], ServiceResult]) -> ServiceResult:
        """Run an intent under the service lock, mapping gateway errors."""
        with self._lock:
            try:
                return operation()
            except GatewayError as e:
                log.warning("intent_rejected", intent=intent, kind=e.kind, error=str(e))
                return ServiceResult(success=False, errors=[str(e)], error_kind=e.kind)
