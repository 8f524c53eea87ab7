"""
Saferpay hosted payment page.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .currency import amount_by_currency
from .errors import GatewayError
from .models import Gateway, MethodKind, PaymentMethods, TokenizationParams
from .outcomes import Outcome, Redirect
from .strategies import GatewayStrategy

__all__ = ["SaferpayCardStrategy", "payment_page_data"]


def _with_query(url: str, **params: str) -> str:
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in params
    ]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def payment_page_data(cart: Mapping[str, Any], return_url: str) -> Dict[str, Any]:
    """
    Payment page request derived from the cart.

    The payer comes back to ``return_url`` with ``redirect_status`` set to
    ``succeeded`` or ``failed``.
    """
    currency = (cart.get("currency") or "EUR").upper()
    data: Dict[str, Any] = {
        "amount": {
            "value": amount_by_currency(currency, cart.get("grand_total")),
            "currency_code": currency,
        },
        "return_urls": {
            "success": _with_query(return_url, gateway="saferpay", redirect_status="succeeded"),
            "fail": _with_query(return_url, gateway="saferpay", redirect_status="failed"),
        },
    }
    if cart.get("number"):
        data["description"] = f"Order {cart['number']}"
    return data


class SaferpayCardStrategy(GatewayStrategy):
    method = MethodKind.CARD
    gateway = Gateway.SAFERPAY

    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        supplied = self.method_params(params).intent
        intent_data = (
            supplied
            if supplied is not None
            else payment_page_data(cart, self.context.page.location)
        )
        intent = await self.context.intents.create({"gateway": "saferpay", "intent": intent_data})
        if not intent.redirect_url:
            raise GatewayError("Saferpay intent has no redirect URL", code="missing_redirect")

        billing = {"intent": {"saferpay": {"token": intent.token}}}
        await self.apply_billing(billing)
        return Redirect(method=self.method, url=intent.redirect_url, billing=billing)
