"""paygate — payment lifecycle and settlement core for a payment gateway."""

from paygate.config import GatewayConfig
from paygate.errors import CooldownError, GatewayError, NotFoundError, ValidationError
from paygate.service import GatewayService, ServiceResult

__version__ = "0.1.0"

__all__ = [
    "CooldownError",
    "GatewayConfig",
    "GatewayError",
    "GatewayService",
    "NotFoundError",
    "ServiceResult",
    "ValidationError",
    "__version__",
]
