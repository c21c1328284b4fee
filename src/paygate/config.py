"""Gateway configuration loaded from the environment.

Values are read from a .env file (if present) and then from the process
environment, which takes precedence:

    PAYGATE_COMMISSION_A        initial flat fee per payment      (default 0)
    PAYGATE_COMMISSION_B        initial percentage fee            (default 0)
    PAYGATE_BLOCK_SUM           initial blocked percentage        (default 0)
    PAYGATE_STRICT_PAYMENT_IDS  reject malformed payment id lists (default true)
    PAYGATE_LOG_LEVEL           DEBUG / INFO / WARNING / ...      (default INFO)
    PAYGATE_LOG_JSON            render logs as JSON               (default false)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from paygate.validation import to_decimal

ENV_PREFIX = "PAYGATE_"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {raw!r}")


def _parse_amount(name: str, raw: str) -> Decimal:
    value = to_decimal(raw)
    if value is None or value < 0:
        raise ValueError(f"{name}: expected a non-negative number, got {raw!r}")
    return value


@dataclass(frozen=True)
class GatewayConfig:
    """Process configuration for one gateway service instance."""
    commission_a: Decimal = Decimal("0")
    commission_b: Decimal = Decimal("0")
    block_sum: Decimal = Decimal("0")
    strict_payment_ids: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> GatewayConfig:
        """Build a config from a .env file and the environment.

        Args:
            env_file: Explicit .env path (defaults to ./.env if it exists).
            environ: Mapping to read instead of os.environ.

        Raises ValueError for any malformed value.
        """
        values: dict[str, Optional[str]] = {}
        path = env_file if env_file is not None else Path.cwd() / ".env"
        if path.exists():
            values.update(dotenv_values(path))
        values.update(os.environ if environ is None else environ)

        def get(key: str) -> Optional[str]:
            raw = values.get(ENV_PREFIX + key)
            return raw if raw not in (None, "") else None

        kwargs: dict[str, object] = {}
        for key, attr in (
            ("COMMISSION_A", "commission_a"),
            ("COMMISSION_B", "commission_b"),
            ("BLOCK_SUM", "block_sum"),
        ):
            raw = get(key)
            if raw is not None:
                kwargs[attr] = _parse_amount(ENV_PREFIX + key, raw)

        raw = get("STRICT_PAYMENT_IDS")
        if raw is not None:
            kwargs["strict_payment_ids"] = _parse_bool(ENV_PREFIX + "STRICT_PAYMENT_IDS", raw)

        raw = get("LOG_JSON")
        if raw is not None:
            kwargs["log_json"] = _parse_bool(ENV_PREFIX + "LOG_JSON", raw)

        raw = get("LOG_LEVEL")
        if raw is not None:
            level = raw.strip().upper()
            if level not in VALID_LOG_LEVELS:
                raise ValueError(
                    f"{ENV_PREFIX}LOG_LEVEL: must be one of {', '.join(VALID_LOG_LEVELS)}"
                )
            kwargs["log_level"] = level

        return cls(**kwargs)  # type: ignore[arg-type]
