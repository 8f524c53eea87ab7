"""
Base class and shared context for gateway strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, NamedTuple, Optional, Sequence

from .config import CheckoutConfig
from .elements import ElementRegistry
from .errors import PaymentError
from .intents import IntentLifecycle
from .models import Gateway, MethodKind, MethodParams, PaymentMethods, TokenizationParams
from .outcomes import Failure, Outcome
from .page import Page
from .scripts import ScriptLoader
from .services import CartService, SettingsService

__all__ = ["CheckoutContext", "GatewayStrategy", "ScriptSpec"]


class ScriptSpec(NamedTuple):
    id: str
    src: str
    global_name: str


@dataclass
class CheckoutContext:
    """Everything one checkout session shares between its strategies."""

    config: CheckoutConfig
    page: Page
    cart: CartService
    settings: SettingsService
    intents: IntentLifecycle
    scripts: ScriptLoader
    elements: ElementRegistry


class GatewayStrategy(ABC):
    """
    Mount and tokenize behaviour for one (method kind, gateway) pair.

    ``tokenize`` raises :class:`PaymentError` on any failure; :meth:`execute`
    turns that into a :class:`Failure` outcome.
    """

    method: ClassVar[MethodKind]
    gateway: ClassVar[Gateway]
    # Redirect-based strategies have nothing to mount.
    mounts: ClassVar[bool] = False

    def __init__(self, context: CheckoutContext) -> None:
        self.context = context

    def scripts(self, methods: PaymentMethods) -> Sequence[ScriptSpec]:
        return ()

    async def prepare(self, methods: PaymentMethods) -> None:
        for script in self.scripts(methods):
            await self.context.scripts.require(script.id, script.src, script.global_name)

    def method_params(self, params: TokenizationParams) -> MethodParams:
        return params.get(self.method) or MethodParams()

    async def mount(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Optional[Any]:
        """Mount UI elements; returns the handle this mount replaced, if any."""
        return None

    @abstractmethod
    async def tokenize(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        ...

    async def execute(
        self,
        params: TokenizationParams,
        cart: Mapping[str, Any],
        methods: PaymentMethods,
    ) -> Outcome:
        try:
            await self.prepare(methods)
            return await self.tokenize(params, cart, methods)
        except PaymentError as exc:
            return Failure(method=self.method, error=exc)

    async def apply_billing(self, billing: Dict[str, Any]) -> Dict[str, Any]:
        return await self.context.cart.update({"billing": billing})
