"""
Stripe.js strategies: cards, iDEAL, Klarna and Bancontact.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .currency import amount_by_currency, currency_code
from .errors import GatewayError
from .models import Gateway, MethodKind, MethodParams, PaymentMethods, TokenizationParams
from .outcomes import Outcome, Redirect, Success
from .page import maybe_await, to_python
from .strategies import GatewayStrategy, ScriptSpec

__all__ = [
    "StripeBancontactStrategy",
    "StripeCardStrategy",
    "StripeIdealStrategy",
    "StripeKlarnaStrategy",
    "bancontact_source_data",
    "billing_details",
    "create_card_payment_method",
    "create_ideal_payment_method",
    "create_source",
    "klarna_source_data",
]

STRIPE_SCRIPT_ID = "stripe-js"
STRIPE_KEY = Gateway.STRIPE.value

# Stripe element event -> caller hook.
ELEMENT_EVENTS = (
    ("change", "on_change"),
    ("ready", "on_ready"),
    ("focus", "on_focus"),
    ("blur", "on_blur"),
    ("escape", "on_escape"),
    ("click", "on_click"),
)

# Elements that carry the payment data and are kept for tokenizing.
PRIMARY_ELEMENTS = frozenset({"card", "cardNumber", "idealBank"})


def _compact(values: Mapping[str, Any]) -> Dict[str, Any]:
    compacted: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, Mapping):
            value = _compact(value)
            if not value:
                continue
        if value is None or value == "":
            continue
        compacted[key] = value
    return compacted


def _split_name(name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if not name:
        return None, None
    first, _, last = name.strip().partition(" ")
    return first or None, last.strip() or None


def stripe_address(address: Mapping[str, Any]) -> Dict[str, Any]:
    return _compact(
        {
            "line1": address.get("address1"),
            "line2": address.get("address2"),
            "city": address.get("city"),
            "state": address.get("state"),
            "postal_code": address.get("zip"),
            "country": address.get("country"),
        }
    )


def billing_details(billing: Optional[Mapping[str, Any]], email: Optional[str] = None) -> Dict[str, Any]:
    billing = billing or {}
    return _compact(
        {
            "name": billing.get("name"),
            "phone": billing.get("phone"),
            "email": email,
            "address": stripe_address(billing),
        }
    )


async def _call(stripe: Any, method: str, *args: Any) -> Mapping[str, Any]:
    result = to_python(await maybe_await(getattr(stripe, method)(*args)))
    if not isinstance(result, Mapping):
        raise GatewayError(f"Stripe.{method} returned no result")
    if result.get("error"):
        raise GatewayError.from_sdk(result["error"])
    return result


async def create_card_payment_method(
    stripe: Any,
    element: Any,
    cart: Mapping[str, Any],
) -> Dict[str, Any]:
    """
    Tokenize the mounted card element and summarize it for the cart billing.
    """
    account = cart.get("account") or {}
    result = await _call(
        stripe,
        "createPaymentMethod",
        {
            "type": "card",
            "card": element,
            "billing_details": billing_details(cart.get("billing"), account.get("email")),
        },
    )
    payment_method = result.get("paymentMethod") or {}
    card = payment_method.get("card") or {}
    checks = card.get("checks") or {}
    return _compact(
        {
            "token": payment_method.get("id"),
            "last4": card.get("last4"),
            "exp_month": card.get("exp_month"),
            "exp_year": card.get("exp_year"),
            "brand": card.get("brand"),
            "address_check": checks.get("address_line1_check"),
            "cvc_check": checks.get("cvc_check"),
            "zip_check": checks.get("address_postal_code_check"),
        }
    )


async def create_ideal_payment_method(
    stripe: Any,
    element: Any,
    billing: Optional[Mapping[str, Any]],
) -> Mapping[str, Any]:
    result = await _call(
        stripe,
        "createPaymentMethod",
        {
            "type": "ideal",
            "ideal": element,
            "billing_details": billing_details(billing),
        },
    )
    return result.get("paymentMethod") or {}


async def create_source(stripe: Any, data: Mapping[str, Any]) -> Mapping[str, Any]:
    result = await _call(stripe, "createSource", dict(data))
    source = result.get("source") or {}
    if not (source.get("redirect") or {}).get("url"):
        raise GatewayError("Stripe source has no redirect URL", code="missing_redirect")
    return source


def klarna_order_items(cart: Mapping[str, Any]) -> List[Dict[str, Any]]:
    currency = cart.get("currency") or "EUR"
    code = currency_code(currency, "EUR")
    items: List[Dict[str, Any]] = []
    for item in cart.get("items") or ():
        product = item.get("product") or {}
        items.append(
            _compact(
                {
                    "type": "sku",
                    "description": product.get("name") or item.get("product_name"),
                    "quantity": item.get("quantity"),
                    "currency": code,
                    "amount": amount_by_currency(currency, item.get("price_total")),
                }
            )
        )

    shipping_total = cart.get("shipping_total")
    if shipping_total:
        shipping = cart.get("shipping") or {}
        items.append(
            {
                "type": "shipping",
                "description": shipping.get("service_name") or "Shipping",
                "currency": code,
                "amount": amount_by_currency(currency, shipping_total),
            }
        )

    tax_total = cart.get("tax_total")
    if tax_total:
        items.append(
            {
                "type": "tax",
                "description": "Taxes",
                "currency": code,
                "amount": amount_by_currency(currency, tax_total),
            }
        )

    discount_total = cart.get("discount_total")
    if discount_total:
        items.append(
            {
                "type": "discount",
                "description": "Discounts",
                "currency": code,
                "amount": -amount_by_currency(currency, discount_total),
            }
        )
    return items


def klarna_source_data(
    cart: Mapping[str, Any],
    store: Mapping[str, Any],
    return_url: str,
) -> Dict[str, Any]:
    currency = cart.get("currency") or "EUR"
    billing = cart.get("billing") or {}
    shipping = cart.get("shipping") or {}
    account = cart.get("account") or {}
    address = billing if billing.get("address1") else shipping
    first_name, last_name = _split_name(address.get("name") or account.get("name"))

    data = _compact(
        {
            "type": "klarna",
            "flow": "redirect",
            "amount": amount_by_currency(currency, cart.get("grand_total")),
            "currency": currency_code(currency, "EUR"),
            "klarna": {
                "product": "payment",
                "purchase_country": address.get("country") or store.get("country"),
                "locale": store.get("locale"),
                "first_name": first_name,
                "last_name": last_name,
            },
            "owner": {
                "name": address.get("name") or account.get("name"),
                "email": account.get("email"),
                "phone": address.get("phone"),
                "address": stripe_address(address),
            },
            "redirect": {"return_url": return_url},
        }
    )
    data["source_order"] = {"items": klarna_order_items(cart)}
    return data


def bancontact_source_data(cart: Mapping[str, Any], return_url: str) -> Dict[str, Any]:
    currency = cart.get("currency") or "EUR"
    billing = cart.get("billing") or {}
    account = cart.get("account") or {}
    return _compact(
        {
            "type": "bancontact",
            "amount": amount_by_currency(currency, cart.get("grand_total")),
            "currency": currency_code(currency, "EUR"),
            "owner": {"name": billing.get("name") or account.get("name")},
            "redirect": {"return_url": return_url},
        }
    )


class StripeStrategy(GatewayStrategy):
    gateway = Gateway.STRIPE

    def scripts(self, methods: PaymentMethods) -> Sequence[ScriptSpec]:
        return (ScriptSpec(STRIPE_SCRIPT_ID, self.context.config.stripe_js_url, "Stripe"),)

    def publishable_key(self, methods: PaymentMethods) -> str:
        for kind in (MethodKind.CARD, self.method):
            descriptor = methods.get(kind)
            if descriptor is not None and descriptor.publishable_key:
                return descriptor.publishable_key
        raise GatewayError("Stripe publishable key is not configured", code="config_error")

    def new_client(self, methods: PaymentMethods) -> Any:
        constructor = self.context.page.get_global("Stripe")
        if constructor is None:
            raise GatewayError("Stripe.js is not loaded", code="sdk_not_loaded")
        return constructor(self.publishable_key(methods))


class StripeElementStrategy(StripeStrategy):
    """Stripe methods that collect details through mounted Stripe Elements."""

    mounts = True

    def mounted(self) -> Tuple[Any, Any]:
        stripe = self.context.elements.client(STRIPE_KEY)
        element = self.context.elements.get(STRIPE_KEY)
        if stripe is None or element is None:
            raise GatewayError(
                f"Stripe {self.method.value} element is not mounted; call create_elements first",
                code="element_not_mounted",
            )
        return stripe, element

    @abstractmethod
    def element_types(self, method_params: MethodParams) -> Sequence[str]:
        ...

    async def mount(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Optional[Any]:
        method_params = self.method_params(params)
        stripe = self.new_client(methods)
        elements = stripe.elements()
        replaced = None
        for element_type in self.element_types(method_params):
            element_params = method_params.for_element(element_type)
            element = elements.create(element_type, dict(element_params.options))
            element.mount(element_params.element_id or f"#{element_type}-element")
            for event, hook_name in ELEMENT_EVENTS:
                hook = element_params.hook(hook_name)
                if hook is not None:
                    element.on(event, hook)
            if element_type in PRIMARY_ELEMENTS:
                replaced = self.context.elements.register(STRIPE_KEY, element)
        self.context.elements.register_client(STRIPE_KEY, stripe)
        logging.info("Mounted Stripe %s element", self.method.value)
        return replaced


class StripeCardStrategy(StripeElementStrategy):
    method = MethodKind.CARD

    def element_types(self, method_params: MethodParams) -> Sequence[str]:
        if method_params.separate_elements:
            return ("cardNumber", "cardExpiry", "cardCvc")
        return ("card",)

    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        stripe, element = self.mounted()
        payment_method = await create_card_payment_method(stripe, element, cart)

        currency = cart.get("currency") or "USD"
        intent_data: Dict[str, Any] = {
            "payment_method": payment_method.get("token"),
            "amount": amount_by_currency(currency, cart.get("grand_total")),
            "currency": currency_code(currency, "USD"),
            "capture_method": "manual",
            "setup_future_usage": "off_session",
        }
        customer = (cart.get("account") or {}).get("stripe_customer")
        if customer:
            intent_data["customer"] = customer

        intent = await self.context.intents.create({"gateway": "stripe", "intent": intent_data})

        if intent.status == "requires_confirmation":
            result = await _call(stripe, "confirmCardPayment", intent.client_secret)
            intent_id = (result.get("paymentIntent") or {}).get("id")
        elif intent.status in ("requires_capture", "succeeded"):
            intent_id = intent.id
        else:
            raise GatewayError(
                f"Unexpected payment intent status '{intent.status}'",
                code="intent_status",
            )

        billing = {
            "method": "card",
            "card": payment_method,
            "intent": {"stripe": {"id": intent_id}},
        }
        await self.apply_billing(billing)
        return Success(method=self.method, billing=billing, intent=intent)


class StripeIdealStrategy(StripeElementStrategy):
    method = MethodKind.IDEAL

    def element_types(self, method_params: MethodParams) -> Sequence[str]:
        return ("idealBank",)

    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        stripe, element = self.mounted()
        payment_method = await create_ideal_payment_method(stripe, element, cart.get("billing"))

        currency = cart.get("currency") or "EUR"
        intent = await self.context.intents.create(
            {
                "gateway": "stripe",
                "intent": {
                    "payment_method": payment_method.get("id"),
                    "amount": amount_by_currency(currency, cart.get("grand_total")),
                    "currency": currency_code(currency, "EUR"),
                    "payment_method_types": "ideal",
                    "confirmation_method": "manual",
                    "confirm": True,
                    "return_url": self.context.page.location,
                },
            }
        )

        billing = {
            "method": "ideal",
            "ideal": {"token": payment_method.get("id")},
            "intent": {"stripe": {"id": intent.id}},
        }
        await self.apply_billing(billing)

        action = None
        if intent.requires_action:
            # Stripe takes the payer to the bank; the return_url brings them back.
            action = await _call(stripe, "handleCardAction", intent.client_secret)
        return Success(method=self.method, billing=billing, intent=intent, action=action)


class StripeKlarnaStrategy(StripeStrategy):
    method = MethodKind.KLARNA

    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        stripe = self.new_client(methods)
        settings = await self.context.settings.get()
        source = await create_source(
            stripe,
            klarna_source_data(cart, settings.get("store") or {}, self.context.page.location),
        )
        billing = {"method": "klarna"}
        await self.apply_billing(billing)
        return Redirect(method=self.method, url=source["redirect"]["url"], billing=billing)


class StripeBancontactStrategy(StripeStrategy):
    method = MethodKind.BANCONTACT

    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        stripe = self.new_client(methods)
        source = await create_source(
            stripe,
            bancontact_source_data(cart, self.context.page.location),
        )
        billing = {"method": "bancontact"}
        await self.apply_billing(billing)
        return Redirect(method=self.method, url=source["redirect"]["url"], billing=billing)
