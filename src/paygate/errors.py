"""Gateway error taxonomy.

Every failure the core can report is one of three kinds. Each is raised
synchronously at the point of detection; nothing is retried.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all classified gateway failures."""

    kind = "gateway"


class ValidationError(GatewayError):
    """Malformed or out-of-range input."""

    kind = "validation"


class NotFoundError(GatewayError):
    """Reference to a shop or payment that does not exist."""

    kind = "not_found"


class CooldownError(GatewayError):
    """Withdrawal attempted before the one-day gap has elapsed."""

    kind = "cooldown"
