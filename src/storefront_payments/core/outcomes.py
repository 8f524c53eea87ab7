"""
Result types returned up the tokenization call chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .errors import PaymentError
from .models import Intent, MethodKind

__all__ = ["Cancelled", "Failure", "Outcome", "Redirect", "Success"]


@dataclass(frozen=True)
class Success:
    """The billing patch was applied to the cart."""

    method: MethodKind
    billing: Mapping[str, Any] = field(default_factory=dict)
    intent: Optional[Intent] = None
    action: Any = None


@dataclass(frozen=True)
class Redirect:
    """The cart was updated and the page must leave for ``url``."""

    method: MethodKind
    url: str
    billing: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Failure:
    method: Optional[MethodKind]
    error: PaymentError
    handled: bool = False


@dataclass(frozen=True)
class Cancelled:
    """The payer dismissed a hosted checkout window."""

    method: MethodKind


Outcome = Union[Success, Redirect, Failure, Cancelled]
