"""
Strategy table and the rules that pick an entry from it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Type

from .braintree import BraintreePayPalStrategy
from .errors import ConfigWarning
from .models import Gateway, MethodKind, PaymentMethods, TokenizationParams
from .saferpay import SaferpayCardStrategy
from .strategies import GatewayStrategy
from .stripe import (
    StripeBancontactStrategy,
    StripeCardStrategy,
    StripeIdealStrategy,
    StripeKlarnaStrategy,
)

__all__ = [
    "STRATEGY_TABLE",
    "TOKENIZE_PRECEDENCE",
    "mount_warning",
    "select_tokenize_method",
    "strategy_class",
]

STRATEGY_TABLE: Mapping[Tuple[MethodKind, Gateway], Type[GatewayStrategy]] = MappingProxyType(
    {
        (MethodKind.CARD, Gateway.STRIPE): StripeCardStrategy,
        (MethodKind.CARD, Gateway.SAFERPAY): SaferpayCardStrategy,
        (MethodKind.IDEAL, Gateway.STRIPE): StripeIdealStrategy,
        (MethodKind.KLARNA, Gateway.STRIPE): StripeKlarnaStrategy,
        (MethodKind.BANCONTACT, Gateway.STRIPE): StripeBancontactStrategy,
        (MethodKind.PAYPAL, Gateway.BRAINTREE): BraintreePayPalStrategy,
    }
)

# First requested-and-enabled kind wins; a later kind is never tokenized.
TOKENIZE_PRECEDENCE = (
    MethodKind.CARD,
    MethodKind.IDEAL,
    MethodKind.KLARNA,
    MethodKind.BANCONTACT,
)

_LABELS = {
    MethodKind.CARD: "credit card",
    MethodKind.IDEAL: "iDEAL",
    MethodKind.PAYPAL: "PayPal",
    MethodKind.KLARNA: "Klarna",
    MethodKind.BANCONTACT: "Bancontact",
}


def strategy_class(kind: MethodKind, gateway: Optional[str]) -> Optional[Type[GatewayStrategy]]:
    try:
        return STRATEGY_TABLE.get((kind, Gateway(gateway)))
    except ValueError:
        return None


def select_tokenize_method(
    params: TokenizationParams,
    methods: PaymentMethods,
) -> Optional[MethodKind]:
    for kind in TOKENIZE_PRECEDENCE:
        if params.get(kind) is not None and methods.get(kind) is not None:
            return kind
    return None


def _disabled(kind: MethodKind) -> ConfigWarning:
    return ConfigWarning(
        method=kind.value,
        reason=(
            f"{_LABELS[kind]} payments are disabled. "
            "See Payment settings in the store dashboard for details."
        ),
    )


def unsupported(kind: MethodKind, gateway: Optional[str]) -> ConfigWarning:
    return ConfigWarning(
        method=kind.value,
        reason=f"{_LABELS[kind]} payments are not supported by the '{gateway}' gateway.",
    )


def mount_warning(kind: MethodKind, methods: PaymentMethods) -> Optional[ConfigWarning]:
    """
    Why ``kind`` cannot be mounted with ``methods``, or ``None`` when it can.
    """
    card = methods.get(MethodKind.CARD)
    if kind in (MethodKind.CARD, MethodKind.IDEAL) and card is None:
        return _disabled(MethodKind.CARD)
    if methods.get(kind) is None:
        return _disabled(kind)

    gateway = methods.gateway_for(kind)
    if strategy_class(kind, gateway) is None:
        return unsupported(kind, gateway)
    if kind is MethodKind.PAYPAL and (card is None or card.gateway != Gateway.BRAINTREE.value):
        return unsupported(kind, card.gateway if card is not None else None)
    return None
