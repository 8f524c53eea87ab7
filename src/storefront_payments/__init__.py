"""
Public facade for the storefront payments package.

The most useful pieces are re-exported so integrators can
``from storefront_payments import ...`` without navigating the package.
"""

from .api import create_api_client, create_intent_lifecycle, create_orchestrator
from .core import (
    ApiRequestError,
    Cancelled,
    CartNotFound,
    CheckoutConfig,
    CheckoutParameters,
    ConfigError,
    ConfigWarning,
    ElementRegistry,
    ErrorNormalizer,
    Failure,
    Gateway,
    GatewayError,
    Intent,
    IntentLifecycle,
    MethodKind,
    MethodsConfigError,
    Outcome,
    Page,
    PaymentError,
    PaymentMethods,
    PaymentOrchestrator,
    Redirect,
    ScriptLoader,
    Success,
    TokenizationParams,
    UnsupportedCombination,
    VaultError,
    amount_by_currency,
    load_checkout_config,
)

__all__ = (
    "ApiRequestError",
    "Cancelled",
    "CartNotFound",
    "CheckoutConfig",
    "CheckoutParameters",
    "ConfigError",
    "ConfigWarning",
    "ElementRegistry",
    "ErrorNormalizer",
    "Failure",
    "Gateway",
    "GatewayError",
    "Intent",
    "IntentLifecycle",
    "MethodKind",
    "MethodsConfigError",
    "Outcome",
    "Page",
    "PaymentError",
    "PaymentMethods",
    "PaymentOrchestrator",
    "Redirect",
    "ScriptLoader",
    "Success",
    "TokenizationParams",
    "UnsupportedCombination",
    "VaultError",
    "amount_by_currency",
    "create_api_client",
    "create_intent_lifecycle",
    "create_orchestrator",
    "load_checkout_config",
)
