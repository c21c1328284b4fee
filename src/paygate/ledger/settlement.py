"""Settlement engine — pays out a shop's completed payments.

For every COMPLETED payment of the shop, in the order it was accepted:

    net = amount - (commission_a + commission_b/100 × amount + commission_c/100 × amount)

commission_a and commission_b are the global settings in effect at
withdrawal time; commission_c is the shop's own rate. The net is
credited, the payment moves to WITHDRAWN, and the shop's last payout
date becomes today.

Invariants:
- A shop can be paid out at most once per calendar day
- last_payout only advances when at least one payment was withdrawn
- total_payment == sum of the per-payment nets
- A negative net (commissions above the amount) passes through as-is
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, DecimalException
from typing import Any, List, Optional, Tuple

import structlog

from paygate.errors import CooldownError, ValidationError
from paygate.ledger.settings import GatewaySettings
from paygate.ledger.store import Ledger
from paygate.models.gateway import (
    PaidOutPayment,
    Payment,
    PaymentStatus,
    Shop,
    WithdrawalResult,
)
from paygate.validation import is_number, today_utc, validate_payout_date

log = structlog.get_logger(__name__)


class SettlementEngine:
    """Computes commission-adjusted payouts and withdraws payments.

    Usage:
        engine = SettlementEngine(ledger, settings)
        result = engine.withdraw(shop_id=1)
        result.total_payment
    """

    def __init__(self, ledger: Ledger, settings: GatewaySettings) -> None:
        self._ledger = ledger
        self._settings = settings

    def net_amount(self, payment: Payment, shop: Shop) -> Decimal:
        """Amount credited to the shop for one payment."""
        amount = payment.amount
        commissions = (
            self._settings.commission_a
            + self._settings.commission_b / Decimal(100) * amount
            + shop.commission_c / Decimal(100) * amount
        )
        return amount - commissions

    def withdraw(self, shop_id: Any, today: Optional[date] = None) -> WithdrawalResult:
        """Withdraw every completed payment of a shop.

        Args:
            shop_id: The shop requesting the payout.
            today: Current date (defaults to today in UTC).

        Raises:
            ValidationError: shop_id is not a positive number.
            NotFoundError: no such shop.
            CooldownError: the shop was already paid out within the last day.
        """
        if not is_number(shop_id):
            raise ValidationError("Invalid shop ID.")
        shop = self._ledger.get_shop(shop_id)

        if today is None:
            today = today_utc()
        if not validate_payout_date(shop.last_payout, today):
            log.warning(
                "withdrawal_cooldown",
                shop_id=shop.shop_id,
                last_payout=shop.last_payout.isoformat(),
            )
            raise CooldownError(
                "The payout has been completed. Please come back tomorrow."
            )

        # Price every payment before touching any status.
        priced: List[Tuple[Payment, Decimal]] = []
        total = Decimal("0")
        try:
            for payment in self._ledger.shop_payments(shop):
                if payment.status != PaymentStatus.COMPLETED:
                    continue
                net = self.net_amount(payment, shop)
                total += net
                priced.append((payment, net))
        except DecimalException as e:
            raise ValidationError(
                f"Cannot compute payout for shop {shop.shop_id}: {e!r}"
            ) from e

        paid: List[PaidOutPayment] = []
        for payment, net in priced:
            payment.transition_to(PaymentStatus.WITHDRAWN)
            paid.append(PaidOutPayment(payment_id=payment.payment_id, amount=net))

        if paid:
            shop.last_payout = today

        log.info(
            "withdrawal_completed",
            shop_id=shop.shop_id,
            withdrawn=len(paid),
            total_payment=str(total),
        )
        return WithdrawalResult(
            shop_id=shop.shop_id,
            total_payment=total,
            payments=tuple(paid),
            last_payout=shop.last_payout,
        )
