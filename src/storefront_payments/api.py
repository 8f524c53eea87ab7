"""
Public, high-level helpers for building a checkout session.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .core.config import (
    CheckoutConfig,
    CheckoutParameters,
    ConfigError,
    load_checkout_config,
)
from .core.client import ApiClient, VaultClient
from .core.intents import IntentLifecycle
from .core.orchestrator import PaymentOrchestrator
from .core.page import Page

__all__ = [
    "ConfigError",
    "create_api_client",
    "create_intent_lifecycle",
    "create_orchestrator",
    "load_checkout_config",
]


def _resolve_config(
    config: Optional[CheckoutConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[CheckoutParameters],
    store_id: Optional[str],
    public_key: Optional[str],
) -> CheckoutConfig:
    if config is not None:
        extras = (overrides, base, parameters, store_id, public_key)
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built CheckoutConfig or individual parameters, not both."
            )
        return config
    return load_checkout_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        store_id=store_id,
        public_key=public_key,
    )


def create_orchestrator(
    page: Page,
    *,
    config: Optional[CheckoutConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[CheckoutParameters] = None,
    store_id: Optional[str] = None,
    public_key: Optional[str] = None,
) -> PaymentOrchestrator:
    """
    Construct a :class:`PaymentOrchestrator` bound to ``page``.

    Callers can either supply a ready-made :class:`CheckoutConfig` or let the
    helper assemble one from environment data.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        store_id=store_id,
        public_key=public_key,
    )
    return PaymentOrchestrator(cfg, page, session=session)


def create_intent_lifecycle(
    *,
    config: Optional[CheckoutConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[CheckoutParameters] = None,
    store_id: Optional[str] = None,
    public_key: Optional[str] = None,
) -> IntentLifecycle:
    """
    Intent helpers without a page, for server-assisted or manual flows.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        store_id=store_id,
        public_key=public_key,
    )
    return IntentLifecycle(VaultClient(cfg, session=session))


def create_api_client(
    *,
    config: CheckoutConfig,
    session: Optional[requests.Session] = None,
) -> ApiClient:
    return ApiClient(config, session=session)
