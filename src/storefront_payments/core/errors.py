"""
Error taxonomy shared by every payment strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

__all__ = [
    "ApiRequestError",
    "CartNotFound",
    "ConfigWarning",
    "GatewayError",
    "MethodsConfigError",
    "NormalizedError",
    "PaymentError",
    "UnsupportedCombination",
    "VaultError",
]


@dataclass(frozen=True)
class NormalizedError:
    code: str
    status: Optional[int]
    message: str
    param: Optional[str] = None


class PaymentError(Exception):
    """Base class for errors raised while mounting or tokenizing."""

    default_code = "payment_error"
    default_status: Optional[int] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status: Optional[int] = None,
        param: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status if status is not None else self.default_status
        self.param = param

    def normalized(self) -> NormalizedError:
        return NormalizedError(
            code=self.code,
            status=self.status,
            message=self.message,
            param=self.param,
        )


class CartNotFound(PaymentError):
    default_code = "cart_not_found"
    default_status = 404

    def __init__(self, message: str = "Cart not found") -> None:
        super().__init__(message)


class MethodsConfigError(PaymentError):
    """The settings service reported a payment configuration error."""

    default_code = "methods_config_error"


class VaultError(PaymentError):
    """Field-level validation failure reported by the vault."""

    default_code = "vault_error"
    default_status = 402

    @classmethod
    def from_errors(cls, errors: Mapping[str, Any]) -> "VaultError":
        # Only the first failing field is surfaced.
        param = next(iter(errors))
        detail = errors[param]
        message = None
        if isinstance(detail, Mapping):
            message = detail.get("message")
        return cls(message or "Unknown error", param=param)


class GatewayError(PaymentError):
    """Native error reported by a third-party payment SDK."""

    default_code = "gateway_error"

    @classmethod
    def from_sdk(cls, error: Any) -> "GatewayError":
        if isinstance(error, Mapping):
            return cls(
                error.get("message") or "Unknown gateway error",
                code=error.get("code") or error.get("type"),
                status=error.get("statusCode"),
                param=error.get("param"),
            )
        return cls(str(error) or "Unknown gateway error")


class ApiRequestError(PaymentError):
    """An HTTP call to the storefront API or the vault failed."""

    default_code = "request_error"


class UnsupportedCombination(PaymentError):
    default_code = "unsupported_combination"


@dataclass(frozen=True)
class ConfigWarning:
    """A requested method that was not mounted; logged, never raised."""

    method: str
    reason: str

    @property
    def message(self) -> str:
        return f"Payment element error: {self.reason}"
