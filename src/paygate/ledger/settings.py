"""Gateway settings: global commissions and the blocked-funds percentage.

Values default to zero until an administrator sets them. A withdrawal
always uses the values in effect when it runs, not those in effect when
the payment was accepted.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog

from paygate.errors import ValidationError
from paygate.models.gateway import SettingsSnapshot
from paygate.validation import is_number, to_decimal

log = structlog.get_logger(__name__)


class GatewaySettings:
    """Holds commission A (flat), commission B (%) and block sum (%).

    Usage:
        settings = GatewaySettings()
        settings.update(1, 2, 10)
        settings.commission_b  # Decimal("2")
    """

    def __init__(
        self,
        commission_a: Decimal = Decimal("0"),
        commission_b: Decimal = Decimal("0"),
        block_sum: Decimal = Decimal("0"),
    ) -> None:
        self._commission_a = commission_a
        self._commission_b = commission_b
        self._block_sum = block_sum

    @property
    def commission_a(self) -> Decimal:
        return self._commission_a

    @property
    def commission_b(self) -> Decimal:
        return self._commission_b

    @property
    def block_sum(self) -> Decimal:
        return self._block_sum

    def update(self, commission_a: Any, commission_b: Any, block_sum: Any) -> SettingsSnapshot:
        """Replace all three values at once.

        Raises ValidationError unless every value is a positive number;
        on failure nothing is changed.
        """
        if not (is_number(commission_a) and is_number(commission_b) and is_number(block_sum)):
            raise ValidationError("Invalid commissions or block sum settings.")

        self._commission_a = to_decimal(commission_a)
        self._commission_b = to_decimal(commission_b)
        self._block_sum = to_decimal(block_sum)

        snapshot = self.snapshot()
        log.info("settings_updated", **snapshot.to_dict())
        return snapshot

    def snapshot(self) -> SettingsSnapshot:
        return SettingsSnapshot(
            commission_a=self._commission_a,
            commission_b=self._commission_b,
            block_sum=self._block_sum,
        )
