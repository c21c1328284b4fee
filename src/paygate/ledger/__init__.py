"""Ledger subsystem — store, settings, status transitions, settlement."""

from paygate.ledger.settings import GatewaySettings
from paygate.ledger.settlement import SettlementEngine
from paygate.ledger.store import IdAllocator, Ledger
from paygate.ledger.transitions import StatusTransitioner

__all__ = [
    "GatewaySettings",
    "IdAllocator",
    "Ledger",
    "SettlementEngine",
    "StatusTransitioner",
]
