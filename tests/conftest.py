"""Fixtures and in-memory doubles for the page, the SDKs and the HTTP clients."""

import asyncio
import copy
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from storefront_payments.core.config import CheckoutConfig
from storefront_payments.core.orchestrator import PaymentOrchestrator
from storefront_payments.core.page import Page


class FakePage(Page):
    def __init__(self, location="https://shop.example.com/checkout", auto_load=True):
        self.globals: Dict[str, Any] = {}
        # script id -> (global name, object) installed when the script loads
        self.provides: Dict[str, Tuple[str, Any]] = {}
        self.scripts: List[Tuple[str, str]] = []
        self.navigated: List[str] = []
        self.auto_load = auto_load
        self._location = location
        self._listeners: Dict[str, List[Callable[[], None]]] = {}

    def append_script(self, script_id, src, on_load):
        self.scripts.append((script_id, src))
        self._listeners.setdefault(script_id, []).append(on_load)
        if self.auto_load:
            asyncio.get_running_loop().call_soon(self.fire_load, script_id)

    def fire_load(self, script_id):
        provided = self.provides.get(script_id)
        if provided is not None:
            name, value = provided
            if name == "braintree.paypalCheckout":
                self.globals["braintree"].paypalCheckout = value
            else:
                self.globals[name] = value
        for listener in self._listeners.pop(script_id, []):
            listener()

    def get_global(self, name):
        return self.globals.get(name)

    @property
    def location(self):
        return self._location

    def navigate(self, url):
        self.navigated.append(url)


class FakeElement:
    def __init__(self, element_type, options):
        self.type = element_type
        self.options = options
        self.selector: Optional[str] = None
        self.handlers: Dict[str, Any] = {}

    def mount(self, selector):
        self.selector = selector

    def on(self, event, handler):
        self.handlers[event] = handler


class FakeElements:
    def __init__(self):
        self.created: List[FakeElement] = []

    def create(self, element_type, options):
        element = FakeElement(element_type, options)
        self.created.append(element)
        return element


class FakeStripe:
    """Stands in for the object returned by ``Stripe(publishable_key)``."""

    def __init__(self):
        self.keys: List[str] = []
        self.elements_instances: List[FakeElements] = []
        self.calls: List[Tuple[str, Any]] = []
        self.payment_method_result: Dict[str, Any] = {
            "paymentMethod": {
                "id": "pm_1",
                "card": {
                    "last4": "4242",
                    "exp_month": 12,
                    "exp_year": 2030,
                    "brand": "visa",
                    "checks": {"cvc_check": "pass"},
                },
            }
        }
        self.confirm_result: Dict[str, Any] = {"paymentIntent": {"id": "pi_1"}}
        self.card_action_result: Dict[str, Any] = {"paymentIntent": {"id": "pi_ideal"}}
        self.source_result: Dict[str, Any] = {
            "source": {"id": "src_1", "redirect": {"url": "https://hooks.stripe.com/redirect/src_1"}}
        }

    def constructor(self, key):
        self.keys.append(key)
        return self

    def elements(self):
        elements = FakeElements()
        self.elements_instances.append(elements)
        return elements

    async def createPaymentMethod(self, data):
        self.calls.append(("createPaymentMethod", data))
        return copy.deepcopy(self.payment_method_result)

    async def confirmCardPayment(self, client_secret):
        self.calls.append(("confirmCardPayment", client_secret))
        return self.confirm_result

    async def handleCardAction(self, client_secret):
        self.calls.append(("handleCardAction", client_secret))
        return self.card_action_result

    async def createSource(self, data):
        self.calls.append(("createSource", data))
        return self.source_result


class FakeRequestClient:
    """Synchronous ``request(method, path, body)`` client with canned responses."""

    def __init__(self, routes=None):
        self.routes: Dict[Tuple[str, str], Any] = dict(routes or {})
        self.calls: List[Tuple[str, str, Any]] = []

    def request(self, method, path, body=None):
        self.calls.append((method, path, copy.deepcopy(body)))
        response = self.routes[(method, path)]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(body)
        return copy.deepcopy(response)

    def calls_to(self, method, path):
        return [body for m, p, body in self.calls if (m, p) == (method, path)]


CART = {
    "id": "cart_1",
    "number": "1001",
    "currency": "EUR",
    "grand_total": 10.5,
    "shipping_total": 2.5,
    "tax_total": 1.0,
    "billing": {
        "name": "Ada Lovelace",
        "address1": "1 Canal Street",
        "city": "Amsterdam",
        "zip": "1011",
        "country": "NL",
    },
    "shipping": {"service_name": "Standard"},
    "account": {"email": "ada@example.com"},
    "items": [
        {"product": {"name": "Notebook"}, "quantity": 1, "price_total": 7.0},
    ],
}


@pytest.fixture
def config():
    return CheckoutConfig(
        store_id="test-store",
        public_key="pk_live_store",
        api_url="https://test-store.example.com/api",
    )


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def stripe(page):
    fake = FakeStripe()
    page.provides["stripe-js"] = ("Stripe", fake.constructor)
    return fake


@pytest.fixture
def cart():
    return copy.deepcopy(CART)


@pytest.fixture
def api(cart):
    return FakeRequestClient(
        {
            ("get", "/cart"): cart,
            ("put", "/cart"): lambda body: dict(cart, **body),
            ("get", "/settings"): {"store": {"country": "NL", "locale": "nl-NL"}},
            ("get", "/settings/payments"): {
                "card": {"gateway": "stripe", "publishable_key": "pk_test_1"},
                "ideal": {"enabled": True},
                "klarna": {"enabled": True},
                "bancontact": {"enabled": True},
            },
            ("get", "/payment/methods"): {"card": {"gateway": "stripe"}},
        }
    )


@pytest.fixture
def vault():
    return FakeRequestClient(
        {
            ("post", "/intent"): {
                "id": "pi_1",
                "status": "requires_confirmation",
                "client_secret": "cs_1",
            },
        }
    )


@pytest.fixture
def orchestrator(config, page, api, vault):
    return PaymentOrchestrator(config, page, api=api, vault=vault)
