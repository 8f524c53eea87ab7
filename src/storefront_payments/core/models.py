"""
Value objects exchanged between the orchestrator, the strategies and callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

__all__ = [
    "Gateway",
    "HOOK_NAMES",
    "Intent",
    "MethodDescriptor",
    "MethodKind",
    "MethodParams",
    "PaymentMethods",
    "TokenizationParams",
]


class MethodKind(str, Enum):
    CARD = "card"
    IDEAL = "ideal"
    PAYPAL = "paypal"
    KLARNA = "klarna"
    BANCONTACT = "bancontact"


class Gateway(str, Enum):
    STRIPE = "stripe"
    BRAINTREE = "braintree"
    SAFERPAY = "saferpay"


HOOK_NAMES = (
    "on_success",
    "on_ready",
    "on_change",
    "on_focus",
    "on_blur",
    "on_escape",
    "on_click",
    "on_cancel",
    "on_error",
)

# Stripe sub-element type -> key under the card params.
_SUB_ELEMENT_KEYS = {
    "card_number": "cardNumber",
    "card_expiry": "cardExpiry",
    "card_cvc": "cardCvc",
}


@dataclass(frozen=True)
class MethodDescriptor:
    """Settings for one enabled payment method."""

    gateway: Optional[str]
    settings: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    @property
    def publishable_key(self) -> Optional[str]:
        return self.settings.get("publishable_key")


@dataclass(frozen=True)
class PaymentMethods:
    """
    Snapshot of the payment methods a merchant has enabled.

    A method that is absent or explicitly disabled maps to ``None``.
    """

    methods: Mapping[str, MethodDescriptor] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def from_response(cls, payload: Optional[Mapping[str, Any]]) -> "PaymentMethods":
        if not isinstance(payload, Mapping):
            payload = {}
        methods: Dict[str, MethodDescriptor] = {}
        for kind, value in payload.items():
            if kind == "error" or not isinstance(value, Mapping):
                continue
            if value.get("enabled") is False:
                continue
            methods[kind] = MethodDescriptor(gateway=value.get("gateway"), settings=dict(value))
        error = payload.get("error")
        return cls(methods=methods, error=str(error) if error else None)

    def get(self, kind: MethodKind | str) -> Optional[MethodDescriptor]:
        key = kind.value if isinstance(kind, MethodKind) else kind
        return self.methods.get(key)

    def gateway_for(self, kind: MethodKind) -> Optional[str]:
        """
        Gateway serving ``kind``.

        Alternative methods hosted by the card processor (iDEAL, Klarna,
        Bancontact) usually carry no gateway of their own and inherit the
        card gateway.
        """
        descriptor = self.get(kind)
        if descriptor is None:
            return None
        if descriptor.gateway:
            return descriptor.gateway
        card = self.get(MethodKind.CARD)
        return card.gateway if card is not None else None

    def as_dict(self) -> Dict[str, Any]:
        return {kind: dict(descriptor.settings) for kind, descriptor in self.methods.items()}


@dataclass(frozen=True)
class MethodParams:
    """Caller-supplied options and hooks for one method kind."""

    element_id: Optional[str] = None
    options: Mapping[str, Any] = field(default_factory=dict)
    hooks: Mapping[str, Any] = field(default_factory=dict)
    separate_elements: bool = False
    sub_elements: Mapping[str, "MethodParams"] = field(default_factory=dict)
    intent: Optional[Mapping[str, Any]] = None
    style: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "MethodParams":
        values = values or {}
        sub_elements = {
            element_type: cls.from_mapping(values[key])
            for key, element_type in _SUB_ELEMENT_KEYS.items()
            if isinstance(values.get(key), Mapping)
        }
        return cls(
            element_id=values.get("element_id"),
            options=dict(values.get("options") or {}),
            hooks={name: values[name] for name in HOOK_NAMES if name in values},
            separate_elements=bool(values.get("separate_elements")),
            sub_elements=sub_elements,
            intent=values.get("intent"),
            style=dict(values.get("style") or {}),
        )

    def has_hook(self, name: str) -> bool:
        return self.hooks.get(name) is not None

    def hook(self, name: str) -> Optional[Callable[..., Any]]:
        """Return the hook ``name`` if it is callable; anything else is ignored."""
        value = self.hooks.get(name)
        return value if callable(value) else None

    def for_element(self, element_type: str) -> "MethodParams":
        return self.sub_elements.get(element_type, self)


@dataclass(frozen=True)
class TokenizationParams:
    card: Optional[MethodParams] = None
    ideal: Optional[MethodParams] = None
    paypal: Optional[MethodParams] = None
    klarna: Optional[MethodParams] = None
    bancontact: Optional[MethodParams] = None

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "TokenizationParams":
        if isinstance(values, TokenizationParams):
            return values
        values = values or {}
        kwargs = {}
        for kind in MethodKind:
            raw = values.get(kind.value)
            # An empty mapping still requests the method with default options.
            if raw is None or raw is False:
                continue
            if isinstance(raw, MethodParams):
                kwargs[kind.value] = raw
            elif isinstance(raw, Mapping):
                kwargs[kind.value] = MethodParams.from_mapping(raw)
            else:
                kwargs[kind.value] = MethodParams()
        return cls(**kwargs)

    def get(self, kind: MethodKind) -> Optional[MethodParams]:
        return getattr(self, kind.value)

    def requested(self) -> list[MethodKind]:
        return [kind for kind in MethodKind if self.get(kind) is not None]


@dataclass(frozen=True)
class Intent:
    id: Optional[str]
    status: Optional[str]
    client_secret: Optional[str] = None
    token: Optional[str] = None
    redirect_url: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "Intent":
        return cls(
            id=payload.get("id"),
            status=payload.get("status"),
            client_secret=payload.get("client_secret"),
            token=payload.get("token"),
            redirect_url=payload.get("redirect_url"),
            raw=dict(payload),
        )

    @property
    def requires_action(self) -> bool:
        return self.status in ("requires_action", "requires_source_action")
