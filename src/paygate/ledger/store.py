"""Ledger — the store of record for shops and payments.

Storage is in-memory for the lifetime of the owning service. The ledger
allocates identifiers, validates registration and acceptance input, and
keeps each shop's payment list in insertion order.

Identifiers come from an IdAllocator per record type: they start at 1,
increase strictly, and are never reused.
"""

from __future__ import annotations

import itertools
import threading
from decimal import Decimal, DecimalException
from typing import Any, Dict, List, Optional

import structlog

from paygate.errors import NotFoundError, ValidationError
from paygate.ledger.settings import GatewaySettings
from paygate.models.gateway import Payment, PaymentStatus, Shop
from paygate.validation import as_record_id, is_empty, is_number, to_decimal

log = structlog.get_logger(__name__)


class IdAllocator:
    """Thread-safe monotonically increasing id source."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()
        self._last = start - 1

    def next_id(self) -> int:
        with self._lock:
            self._last = next(self._counter)
            return self._last

    @property
    def last(self) -> int:
        """The most recently allocated id (0 before the first allocation)."""
        return self._last


class Ledger:
    """In-memory store of shops and payments.

    Usage:
        ledger = Ledger(settings)
        shop = ledger.register_shop("Coffee Corner", 5)
        payment = ledger.accept_payment(shop.shop_id, 100)
    """

    def __init__(self, settings: GatewaySettings) -> None:
        self._settings = settings
        self._shops: Dict[int, Shop] = {}
        self._payments: Dict[int, Payment] = {}
        self._shop_ids = IdAllocator()
        self._payment_ids = IdAllocator()

    def register_shop(self, name: Any, commission_c: Any) -> Shop:
        """Register a new shop.

        Raises ValidationError if the name is empty or whitespace-only or
        commission_c is not a positive number.
        """
        if is_empty(name) or not is_number(commission_c):
            raise ValidationError("Invalid name or commission. Check your request data.")

        shop = Shop(
            shop_id=self._shop_ids.next_id(),
            name=name,
            commission_c=to_decimal(commission_c),
        )
        self._shops[shop.shop_id] = shop
        log.info("shop_registered", shop_id=shop.shop_id, commission_c=str(shop.commission_c))
        return shop

    def accept_payment(self, shop_id: Any, amount: Any) -> Payment:
        """Accept a payment for an existing shop.

        The blocked amount is computed from the block sum in effect now.
        Raises ValidationError for a non-positive amount or shop id and
        NotFoundError if the shop does not exist.
        """
        if not is_number(amount) or not is_number(shop_id):
            raise ValidationError("Invalid shop ID or amount. Check your request data.")

        shop = self.get_shop(shop_id)
        value = to_decimal(amount)
        try:
            blocked_amount = self._settings.block_sum / Decimal(100) * value
        except DecimalException as e:
            raise ValidationError(f"Cannot compute blocked amount: {e!r}") from e
        payment = Payment(
            payment_id=self._payment_ids.next_id(),
            shop_id=shop.shop_id,
            amount=value,
            blocked_amount=blocked_amount,
            status=PaymentStatus.ACCEPTED,
        )
        self._payments[payment.payment_id] = payment
        shop.payment_ids.append(payment.payment_id)
        log.info(
            "payment_accepted",
            payment_id=payment.payment_id,
            shop_id=shop.shop_id,
            amount=str(payment.amount),
            blocked_amount=str(payment.blocked_amount),
        )
        return payment

    def get_shop(self, shop_id: Any) -> Shop:
        shop = self.find_shop(shop_id)
        if shop is None:
            raise NotFoundError("Shop not found")
        return shop

    def find_shop(self, shop_id: Any) -> Optional[Shop]:
        key = as_record_id(shop_id)
        return self._shops.get(key) if key is not None else None

    def get_payment(self, payment_id: Any) -> Payment:
        payment = self.find_payment(payment_id)
        if payment is None:
            raise NotFoundError("Payment not found")
        return payment

    def find_payment(self, payment_id: Any) -> Optional[Payment]:
        key = as_record_id(payment_id)
        return self._payments.get(key) if key is not None else None

    def shop_payments(self, shop: Shop) -> List[Payment]:
        """Return the shop's payments in the order they were accepted."""
        return [self._payments[pid] for pid in shop.payment_ids if pid in self._payments]

    def payments_snapshot(self) -> List[Payment]:
        """Return every payment in id order."""
        return [self._payments[pid] for pid in sorted(self._payments)]

    @property
    def shop_count(self) -> int:
        return len(self._shops)

    @property
    def payment_count(self) -> int:
        return len(self._payments)
