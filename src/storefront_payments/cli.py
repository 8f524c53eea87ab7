"""
Command-line interface for inspecting payment settings and managing intents.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence, Tuple

import requests

from .api import ConfigError, create_api_client, create_intent_lifecycle, load_checkout_config
from .core.errors import PaymentError
from .core.models import PaymentMethods


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _json_object(value: str) -> Dict[str, Any]:
    raw = Path(value[1:]).read_text(encoding="utf-8") if value.startswith("@") else value
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise argparse.ArgumentTypeError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise argparse.ArgumentTypeError("Intent data must be a JSON object")
    return data


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storefront-payments",
        description="Inspect payment methods and create or update payment intents",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing STOREFRONT_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("methods", help="Print the enabled payment methods")
    for name, verb in (("create-intent", "Create"), ("update-intent", "Update")):
        command = commands.add_parser(name, help=f"{verb} a payment intent through the vault")
        command.add_argument("--gateway", required=True, help="Gateway id, e.g. stripe or saferpay")
        command.add_argument(
            "--data",
            required=True,
            type=_json_object,
            help="Intent payload as JSON, or @path to a JSON file",
        )
    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_checkout_config(env_file=args.env_file, overrides=overrides)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    session = requests.Session()
    try:
        if args.command == "methods":
            payload = create_api_client(config=config, session=session).request(
                "get", "/payment/methods"
            )
            _print_json(PaymentMethods.from_response(payload).as_dict())
            return 0

        intents = create_intent_lifecycle(config=config, session=session)
        data = {"gateway": args.gateway, "intent": args.data}
        if args.command == "create-intent":
            intent = asyncio.run(intents.create(data))
        else:
            intent = asyncio.run(intents.update(data))
    except PaymentError as exc:
        logging.error("%s failed: %s", args.command, exc)
        return 1

    logging.info("Intent %s is %s", intent.id, intent.status)
    _print_json(dict(intent.raw))
    return 0
