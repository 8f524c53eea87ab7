"""
Configuration objects and helpers for the checkout client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode, urlparse

from .environment import build_environment

__all__ = [
    "CheckoutConfig",
    "CheckoutParameters",
    "ConfigError",
    "load_checkout_config",
]

DEFAULT_VAULT_URL = "https://vault.schema.io"
DEFAULT_STRIPE_JS_URL = "https://js.stripe.com/v3/"
DEFAULT_BRAINTREE_VERSION = "3.57.0"
PAYPAL_SDK_URL = "https://www.paypal.com/sdk/js"

_PARAMETER_TO_ENV_KEY = {
    "store_id": "STOREFRONT_STORE_ID",
    "public_key": "STOREFRONT_PUBLIC_KEY",
    "api_url": "STOREFRONT_API_URL",
    "vault_url": "STOREFRONT_VAULT_URL",
    "timeout_seconds": "STOREFRONT_TIMEOUT_SECONDS",
    "stripe_js_url": "STOREFRONT_STRIPE_JS_URL",
    "braintree_version": "STOREFRONT_BRAINTREE_VERSION",
}


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


@dataclass(frozen=True)
class CheckoutParameters:
    """
    Explicit parameter bundle for constructing :class:`CheckoutConfig`.

    Anything left as ``None`` falls back to the environment.
    """

    store_id: Optional[str] = None
    public_key: Optional[str] = None
    api_url: Optional[str] = None
    vault_url: Optional[str] = None
    timeout_seconds: Optional[int | str] = None
    stripe_js_url: Optional[str] = None
    braintree_version: Optional[str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = str(value)
        return overrides


def _require(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def _normalize_url(raw_url: str, field_name: str) -> str:
    value = raw_url.strip().rstrip("/")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"{field_name} is not a valid http(s) URL")
    return value


def _positive_int(raw_value: str, field_name: str) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer, got '{raw_value}'") from exc
    if value <= 0:
        raise ConfigError(f"{field_name} must be greater than zero")
    return value


@dataclass(frozen=True)
class CheckoutConfig:
    store_id: str
    public_key: str
    api_url: str
    vault_url: str = DEFAULT_VAULT_URL
    timeout_seconds: int = 30
    stripe_js_url: str = DEFAULT_STRIPE_JS_URL
    braintree_version: str = DEFAULT_BRAINTREE_VERSION

    @property
    def braintree_client_url(self) -> str:
        return f"https://js.braintreegateway.com/web/{self.braintree_version}/js/client.min.js"

    @property
    def braintree_paypal_checkout_url(self) -> str:
        return (
            f"https://js.braintreegateway.com/web/{self.braintree_version}"
            "/js/paypal-checkout.min.js"
        )

    def paypal_sdk_url(self, client_id: str, merchant_id: str) -> str:
        query = urlencode(
            {"client-id": client_id, "merchant-id": merchant_id, "vault": "true"}
        )
        return f"{PAYPAL_SDK_URL}?{query}"

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "CheckoutConfig":
        store_id = _require(values, "STOREFRONT_STORE_ID")
        public_key = _require(values, "STOREFRONT_PUBLIC_KEY")

        api_url = _normalize_url(
            values.get("STOREFRONT_API_URL") or f"https://{store_id}.swell.store/api",
            "STOREFRONT_API_URL",
        )
        vault_url = _normalize_url(
            values.get("STOREFRONT_VAULT_URL") or DEFAULT_VAULT_URL,
            "STOREFRONT_VAULT_URL",
        )
        timeout_seconds = _positive_int(
            values.get("STOREFRONT_TIMEOUT_SECONDS", "30"),
            "STOREFRONT_TIMEOUT_SECONDS",
        )
        stripe_js_url = values.get("STOREFRONT_STRIPE_JS_URL") or DEFAULT_STRIPE_JS_URL
        braintree_version = (
            values.get("STOREFRONT_BRAINTREE_VERSION") or DEFAULT_BRAINTREE_VERSION
        )

        return cls(
            store_id=store_id,
            public_key=public_key,
            api_url=api_url,
            vault_url=vault_url,
            timeout_seconds=timeout_seconds,
            stripe_js_url=stripe_js_url,
            braintree_version=braintree_version,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[CheckoutParameters] = None,
        **explicit: Any,
    ) -> "CheckoutConfig":
        merged_overrides = dict(overrides or {})
        if parameters is not None:
            merged_overrides.update(parameters.as_overrides())
        for key, value in explicit.items():
            if value is None:
                continue
            try:
                env_key = _PARAMETER_TO_ENV_KEY[key]
            except KeyError as exc:
                raise TypeError(f"Unknown checkout parameter '{key}'") from exc
            merged_overrides[env_key] = str(value)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_checkout_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[CheckoutParameters] = None,
    store_id: Optional[str] = None,
    public_key: Optional[str] = None,
    api_url: Optional[str] = None,
    vault_url: Optional[str] = None,
    timeout_seconds: Optional[int | str] = None,
    stripe_js_url: Optional[str] = None,
    braintree_version: Optional[str] = None,
) -> CheckoutConfig:
    """
    Convenience wrapper that mirrors :meth:`CheckoutConfig.from_env`.

    Settings can come from the process environment, a ``.env`` file, keyword
    arguments, or any combination; keyword arguments win.
    """
    return CheckoutConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        store_id=store_id,
        public_key=public_key,
        api_url=api_url,
        vault_url=vault_url,
        timeout_seconds=timeout_seconds,
        stripe_js_url=stripe_js_url,
        braintree_version=braintree_version,
    )
