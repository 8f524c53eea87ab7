"""
PayPal checkout through Braintree.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .errors import GatewayError, PaymentError, UnsupportedCombination
from .models import Gateway, MethodKind, MethodParams, PaymentMethods, TokenizationParams
from .normalizer import ErrorNormalizer
from .outcomes import Failure, Outcome, Success
from .page import maybe_await, to_python
from .strategies import GatewayStrategy, ScriptSpec

__all__ = ["BraintreePayPalStrategy"]

BRAINTREE_KEY = Gateway.BRAINTREE.value


class BraintreePayPalStrategy(GatewayStrategy):
    """
    Renders the PayPal button; the payer's approval completes tokenization.
    """

    method = MethodKind.PAYPAL
    gateway = Gateway.BRAINTREE
    mounts = True

    def scripts(self, methods: PaymentMethods) -> Sequence[ScriptSpec]:
        config = self.context.config
        paypal = methods.get(MethodKind.PAYPAL)
        client_id = paypal.get("client_id", "") if paypal is not None else ""
        merchant_id = paypal.get("merchant_id", "") if paypal is not None else ""
        return (
            ScriptSpec("paypal-sdk", config.paypal_sdk_url(client_id, merchant_id), "paypal"),
            ScriptSpec("braintree-web", config.braintree_client_url, "braintree"),
        )

    async def prepare(self, methods: PaymentMethods) -> None:
        await super().prepare(methods)
        braintree = self.context.page.get_global("braintree")
        if braintree is not None and getattr(braintree, "paypalCheckout", None) is None:
            await self.context.scripts.ensure(
                "braintree-web-paypal-checkout",
                self.context.config.braintree_paypal_checkout_url,
            )

    async def mount(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Optional[Any]:
        paypal_params = self.method_params(params)
        normalizer = ErrorNormalizer(params)
        authorization = await self.context.intents.authorize(BRAINTREE_KEY)

        braintree = self.context.page.get_global("braintree")
        paypal = self.context.page.get_global("paypal")
        try:
            client = await maybe_await(braintree.client.create({"authorization": authorization}))
            checkout = await maybe_await(braintree.paypalCheckout.create({"client": client}))
            buttons = paypal.Buttons(
                self.button_options(checkout, cart, paypal_params, normalizer)
            )
            await maybe_await(buttons.render(paypal_params.element_id or "#paypal-button"))
        except Exception as exc:  # noqa: BLE001
            await normalizer.paypal_error(exc)
            return None

        self.context.elements.register_client(BRAINTREE_KEY, client)
        logging.info("Rendered PayPal button")
        return self.context.elements.register(BRAINTREE_KEY, buttons)

    def button_options(
        self,
        checkout: Any,
        cart: Mapping[str, Any],
        paypal_params: MethodParams,
        normalizer: ErrorNormalizer,
    ) -> Dict[str, Callable[..., Any] | Mapping[str, Any]]:
        async def create_billing_agreement(*_: Any) -> Any:
            return await maybe_await(
                checkout.createPayment(
                    {
                        "flow": "vault",
                        "currency": cart.get("currency"),
                        "amount": cart.get("grand_total"),
                    }
                )
            )

        async def on_approve(data: Any, actions: Any = None) -> Outcome:
            return await self.approve(checkout, data, actions, paypal_params, normalizer)

        async def on_cancel(*_: Any) -> Outcome:
            return await normalizer.paypal_cancel()

        async def on_error(error: Any) -> None:
            await normalizer.paypal_error(error)

        return {
            "style": dict(paypal_params.style),
            "createBillingAgreement": create_billing_agreement,
            "onApprove": on_approve,
            "onCancel": on_cancel,
            "onError": on_error,
        }

    async def approve(
        self,
        checkout: Any,
        data: Any,
        actions: Any,
        paypal_params: MethodParams,
        normalizer: ErrorNormalizer,
    ) -> Outcome:
        try:
            payload = to_python(await maybe_await(checkout.tokenizePayment(data)))
            nonce = payload.get("nonce") if isinstance(payload, Mapping) else None
            if not nonce:
                raise GatewayError("PayPal approval returned no nonce", code="missing_nonce")
            billing = {"paypal": {"nonce": nonce}}
            await self.apply_billing(billing)
            on_success = paypal_params.hook("on_success")
            if on_success is not None:
                await maybe_await(on_success(data, actions))
        except Exception as exc:  # noqa: BLE001
            error = exc if isinstance(exc, PaymentError) else GatewayError.from_sdk(exc)
            await normalizer.paypal_error(error)
            return Failure(method=self.method, error=error, handled=True)
        return Success(method=self.method, billing=billing)

    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        return Failure(
            method=self.method,
            error=UnsupportedCombination("PayPal payments are completed from the PayPal button"),
        )
