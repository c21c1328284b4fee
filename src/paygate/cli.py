"""paygate CLI — drives the gateway core from a script of intents.

State lives only for the lifetime of one process, so every command
replays a JSON script against a fresh service:

    [
      {"intent": "update_settings", "commission_a": 1, "commission_b": 2, "block_sum": 10},
      {"intent": "register_shop", "name": "Coffee Corner", "commission_c": 5},
      {"intent": "accept_payment", "shop_id": 1, "amount": 100},
      {"intent": "process_payments", "payment_ids": [1]},
      {"intent": "complete_payments", "payment_ids": [1]},
      {"intent": "withdraw", "shop_id": 1}
    ]

Usage:
    python -m paygate.cli replay script.json
    python -m paygate.cli replay script.json --lenient-ids
    python -m paygate.cli status script.json
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Optional

from paygate.config import VALID_LOG_LEVELS, GatewayConfig
from paygate.log import configure_logging
from paygate.service import GatewayService, ServiceResult


# intent name → (service method, argument names)
INTENTS: dict[str, tuple[str, tuple[str, ...]]] = {
    "update_settings": ("update_settings", ("commission_a", "commission_b", "block_sum")),
    "register_shop": ("register_shop", ("name", "commission_c")),
    "accept_payment": ("accept_payment", ("shop_id", "amount")),
    "process_payments": ("process_payments", ("payment_ids",)),
    "complete_payments": ("complete_payments", ("payment_ids",)),
    "withdraw": ("withdraw", ("shop_id",)),
}


class UsageError(Exception):
    """Raised when a script or configuration cannot be used."""


def load_script(path: Path) -> list[dict[str, Any]]:
    """Load and shape-check an intent script."""
    try:
        with path.open("r", encoding="utf-8") as f:
            steps = json.load(f)
    except OSError as e:
        raise UsageError(f"Cannot read script {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise UsageError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(steps, list):
        raise UsageError("Script must be a JSON list of intents")
    for index, step in enumerate(steps):
        if not isinstance(step, dict) or step.get("intent") not in INTENTS:
            raise UsageError(
                f"Step {index}: expected an object with intent in "
                f"[{', '.join(INTENTS)}]"
            )
    return steps


def run_step(service: GatewayService, step: dict[str, Any]) -> ServiceResult:
    """Dispatch one intent; missing arguments are passed as None."""
    method_name, arg_names = INTENTS[step["intent"]]
    method = getattr(service, method_name)
    return method(*(step.get(name) for name in arg_names))


def _make_service(args: argparse.Namespace) -> GatewayService:
    try:
        config = GatewayConfig.from_env(env_file=args.env_file)
    except ValueError as e:
        raise UsageError(f"Invalid configuration: {e}") from e
    if args.lenient_ids:
        config = dataclasses.replace(config, strict_payment_ids=False)
    if args.log_level:
        level = args.log_level.upper()
        if level not in VALID_LOG_LEVELS:
            raise UsageError(f"Unknown log level: {args.log_level}")
        config = dataclasses.replace(config, log_level=level)
    configure_logging(config.log_level, config.log_json)
    return GatewayService(config)


def _replay(args: argparse.Namespace) -> tuple[GatewayService, list[tuple[str, ServiceResult]]]:
    steps = load_script(args.script)
    service = _make_service(args)
    return service, [(step["intent"], run_step(service, step)) for step in steps]


def cmd_replay(args: argparse.Namespace) -> int:
    _, results = _replay(args)
    for intent, result in results:
        print(json.dumps({
            "intent": intent,
            "success": result.success,
            "data": result.data,
            "errors": result.errors,
            "error_kind": result.error_kind,
        }, sort_keys=True))
    return 0 if all(r.success for _, r in results) else 1


def cmd_status(args: argparse.Namespace) -> int:
    service, _ = _replay(args)
    print(json.dumps(service.status(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paygate",
        description="paygate — payment lifecycle and settlement core",
    )
    sub = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("replay", "Run an intent script and print each result"),
        ("status", "Run an intent script and print the final status"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("script", type=Path, help="Path to a JSON intent script")
        p.add_argument("--env-file", type=Path, default=None, help="Path to a .env file")
        p.add_argument(
            "--lenient-ids", action="store_true",
            help="Accept malformed payment id lists (legacy behaviour)",
        )
        p.add_argument("--log-level", default=None, help="Override PAYGATE_LOG_LEVEL")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "replay": cmd_replay,
        "status": cmd_status,
    }

    try:
        return commands[args.command](args)
    except UsageError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
