"""
Core primitives that implement payment element mounting and tokenization.
"""

from .client import ApiClient, VaultClient
from .config import (
    CheckoutConfig,
    CheckoutParameters,
    ConfigError,
    load_checkout_config,
)
from .currency import amount_by_currency
from .elements import ElementRegistry
from .environment import CheckoutEnvironment, build_environment, read_settings_file
from .errors import (
    ApiRequestError,
    CartNotFound,
    ConfigWarning,
    GatewayError,
    MethodsConfigError,
    NormalizedError,
    PaymentError,
    UnsupportedCombination,
    VaultError,
)
from .intents import IntentLifecycle
from .models import (
    Gateway,
    Intent,
    MethodDescriptor,
    MethodKind,
    MethodParams,
    PaymentMethods,
    TokenizationParams,
)
from .normalizer import ErrorNormalizer
from .orchestrator import PaymentOrchestrator
from .outcomes import Cancelled, Failure, Outcome, Redirect, Success
from .page import Page
from .scripts import ScriptHandle, ScriptLoader

__all__ = [
    "ApiClient",
    "ApiRequestError",
    "Cancelled",
    "CartNotFound",
    "CheckoutConfig",
    "CheckoutEnvironment",
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
    "MethodDescriptor",
    "MethodKind",
    "MethodParams",
    "MethodsConfigError",
    "NormalizedError",
    "Outcome",
    "Page",
    "PaymentError",
    "PaymentMethods",
    "PaymentOrchestrator",
    "Redirect",
    "ScriptHandle",
    "ScriptLoader",
    "Success",
    "TokenizationParams",
    "UnsupportedCombination",
    "VaultClient",
    "VaultError",
    "amount_by_currency",
    "build_environment",
    "load_checkout_config",
    "read_settings_file",
]
