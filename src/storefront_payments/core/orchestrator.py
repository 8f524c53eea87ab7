"""
Public facade that mounts payment elements and tokenizes the cart's payment.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import requests

from .client import ApiClient, VaultClient
from .config import CheckoutConfig
from .dispatch import mount_warning, select_tokenize_method, strategy_class
from .elements import ElementRegistry
from .errors import (
    CartNotFound,
    ConfigWarning,
    MethodsConfigError,
    PaymentError,
    UnsupportedCombination,
)
from .intents import IntentLifecycle
from .models import Intent, PaymentMethods, TokenizationParams
from .normalizer import ErrorNormalizer
from .outcomes import Failure, Outcome
from .page import Page
from .scripts import ScriptLoader
from .services import CartService, RequestClient, SettingsService
from .strategies import CheckoutContext

__all__ = ["PaymentOrchestrator"]

ParamsInput = Union[TokenizationParams, Mapping[str, Any]]


class PaymentOrchestrator:
    """
    One checkout session on one page.

    The script cache and element registry live on the instance, so separate
    orchestrators never see each other's elements.
    """

    def __init__(
        self,
        config: CheckoutConfig,
        page: Page,
        *,
        session: Optional[requests.Session] = None,
        api: Optional[RequestClient] = None,
        vault: Optional[RequestClient] = None,
    ) -> None:
        self.config = config
        self.api = api or ApiClient(config, session=session)
        vault = vault or VaultClient(config, session=session)
        self.context = CheckoutContext(
            config=config,
            page=page,
            cart=CartService(self.api),
            settings=SettingsService(self.api),
            intents=IntentLifecycle(vault),
            scripts=ScriptLoader(page),
            elements=ElementRegistry(),
        )
        self.params: Optional[TokenizationParams] = None
        self._methods: Optional[PaymentMethods] = None

    async def list_methods(self, *, refresh: bool = False) -> PaymentMethods:
        if self._methods is None or refresh:
            payload = await asyncio.to_thread(self.api.request, "get", "/payment/methods")
            self._methods = PaymentMethods.from_response(payload)
        return self._methods

    def reset(self) -> None:
        """Forget mounted elements, SDK clients, parameters and cached settings."""
        self.context.elements.clear()
        self.context.settings.clear()
        self.params = None
        self._methods = None
        logging.debug("Checkout session reset")

    async def _checkout_state(self, refresh: bool = False) -> Tuple[Dict[str, Any], PaymentMethods]:
        cart = await self.context.cart.get()
        if not cart:
            raise CartNotFound()
        methods = await self.context.settings.payments(refresh=refresh)
        if methods.error:
            raise MethodsConfigError(methods.error)
        return cart, methods

    async def create_elements(
        self,
        params: Optional[ParamsInput] = None,
        *,
        refresh: bool = False,
    ) -> List[ConfigWarning]:
        """
        Mount the elements requested in ``params``.

        Methods that are disabled or unsupported are skipped with a logged
        :class:`ConfigWarning`; the warnings are also returned. Pass ``refresh=True``
        to reload the store payment settings first.
        """
        self.params = TokenizationParams.from_mapping(params)
        cart, methods = await self._checkout_state(refresh)

        warnings: List[ConfigWarning] = []
        for kind in self.params.requested():
            warning = mount_warning(kind, methods)
            if warning is not None:
                logging.warning(warning.message)
                warnings.append(warning)
                continue
            strategy = strategy_class(kind, methods.gateway_for(kind))(self.context)
            if not strategy.mounts:
                continue
            await strategy.prepare(methods)
            await strategy.mount(self.params, cart, methods)
        return warnings

    async def tokenize(
        self,
        params: Optional[ParamsInput] = None,
        *,
        refresh: bool = False,
    ) -> Outcome:
        """
        Tokenize with the first requested method that is enabled.

        Errors go to the caller's ``on_error`` hook when one is defined and are
        raised otherwise. Redirect outcomes leave the page.
        """
        cart, methods = await self._checkout_state(refresh)
        resolved = TokenizationParams.from_mapping(params) if params is not None else self.params
        if resolved is None:
            raise PaymentError("Tokenization parameters not passed", code="missing_params")

        outcome = await self._dispatch(resolved, cart, methods)
        return await ErrorNormalizer(resolved).finalize(outcome, self.context.page)

    async def _dispatch(
        self,
        params: TokenizationParams,
        cart: Dict[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        kind = select_tokenize_method(params, methods)
        if kind is None:
            return Failure(
                method=None,
                error=UnsupportedCombination(
                    "No enabled payment method matches the tokenization parameters"
                ),
            )
        gateway = methods.gateway_for(kind)
        strategy_type = strategy_class(kind, gateway)
        if strategy_type is None:
            return Failure(
                method=kind,
                error=UnsupportedCombination(
                    f"{kind.value} payments are not supported by the '{gateway}' gateway"
                ),
            )
        logging.info("Tokenizing %s payment with %s", kind.value, gateway)
        return await strategy_type(self.context).execute(params, cart, methods)

    async def create_intent(self, data: Mapping[str, Any]) -> Intent:
        return await self.context.intents.create(data)

    async def update_intent(self, data: Mapping[str, Any]) -> Intent:
        return await self.context.intents.update(data)
