"""
Routes tokenization outcomes to the caller's hooks.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Tuple

from .errors import GatewayError, PaymentError
from .models import MethodKind, MethodParams, TokenizationParams
from .outcomes import Cancelled, Failure, Outcome, Redirect, Success
from .page import Page, maybe_await

__all__ = ["ERROR_HOOK_PRECEDENCE", "ErrorNormalizer"]

ERROR_HOOK_PRECEDENCE = (
    MethodKind.CARD,
    MethodKind.IDEAL,
    MethodKind.KLARNA,
    MethodKind.BANCONTACT,
)


class ErrorNormalizer:
    """
    Turns an :data:`Outcome` into caller-visible effects.

    Errors go to the first ``on_error`` hook defined in
    :data:`ERROR_HOOK_PRECEDENCE`, whichever method produced them. When that
    hook is missing or not callable the original error is raised instead.
    """

    def __init__(self, params: TokenizationParams) -> None:
        self.params = params

    def error_hook(self) -> Tuple[Optional[MethodKind], Any]:
        for kind in ERROR_HOOK_PRECEDENCE:
            method_params = self.params.get(kind)
            if method_params is not None and method_params.has_hook("on_error"):
                return kind, method_params.hooks["on_error"]
        return None, None

    async def handle(self, failure: Failure) -> Failure:
        _, hook = self.error_hook()
        if not callable(hook):
            raise failure.error
        await maybe_await(hook(failure.error))
        return replace(failure, handled=True)

    async def finalize(self, outcome: Outcome, page: Page) -> Outcome:
        if isinstance(outcome, Failure):
            return await self.handle(outcome)

        if isinstance(outcome, Redirect):
            logging.info("Redirecting to %s to complete %s payment", outcome.url, outcome.method.value)
            page.navigate(outcome.url)
            return outcome

        method_params = self.params.get(outcome.method) or MethodParams()
        if isinstance(outcome, Success):
            on_success = method_params.hook("on_success")
            if on_success is not None:
                try:
                    await maybe_await(on_success())
                except Exception as exc:  # noqa: BLE001
                    failure = Failure(method=outcome.method, error=self._as_payment_error(exc))
                    return await self.handle(failure)
        elif isinstance(outcome, Cancelled):
            on_cancel = method_params.hook("on_cancel")
            if on_cancel is not None:
                await maybe_await(on_cancel())
        return outcome

    # PayPal buttons report through their own hooks only.

    async def paypal_error(self, error: Any) -> None:
        error = self._as_payment_error(error)
        hook = self._paypal_params().hook("on_error")
        if hook is None:
            logging.error("PayPal error: %s", error)
            return
        await maybe_await(hook(error))

    async def paypal_cancel(self) -> Cancelled:
        hook = self._paypal_params().hook("on_cancel")
        if hook is None:
            logging.info("PayPal payment cancelled")
        else:
            await maybe_await(hook())
        return Cancelled(method=MethodKind.PAYPAL)

    def _paypal_params(self) -> MethodParams:
        return self.params.paypal or MethodParams()

    @staticmethod
    def _as_payment_error(error: Any) -> PaymentError:
        if isinstance(error, PaymentError):
            return error
        converted = GatewayError.from_sdk(error)
        if isinstance(error, BaseException):
            converted.__cause__ = error
        return converted
