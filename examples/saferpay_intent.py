"""
Minimal script that creates a Saferpay payment page intent through the public API.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from storefront_payments import ConfigError, PaymentError, create_intent_lifecycle, load_checkout_config
from storefront_payments.core.saferpay import payment_page_data


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a Saferpay intent for a fixed amount")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing STOREFRONT_* settings",
    )
    parser.add_argument("--currency", default="CHF", help="ISO currency code (default: CHF)")
    parser.add_argument("--amount", default="10.00", help="Amount in major units (default: 10.00)")
    parser.add_argument(
        "--return-url",
        default="https://example.com/checkout",
        help="Where Saferpay sends the payer back to",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_checkout_config(env_file=args.env_file)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    intents = create_intent_lifecycle(config=config)
    page_data = payment_page_data(
        {"currency": args.currency, "grand_total": args.amount},
        args.return_url,
    )

    try:
        intent = asyncio.run(intents.create({"gateway": "saferpay", "intent": page_data}))
    except PaymentError as exc:
        logging.error("Intent creation failed: %s", exc)
        return 1

    logging.info("Send the payer to %s (token %s)", intent.redirect_url, intent.token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
