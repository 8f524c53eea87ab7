"""
The host page the checkout runs in.

Browser capabilities are reached only through a :class:`Page`, so the same
strategies run on a real storefront page (for example Pyodide driving the DOM)
or against the in-memory doubles used by the test-suite.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable

__all__ = ["Page", "maybe_await", "to_python"]


class Page(ABC):
    @abstractmethod
    def append_script(self, script_id: str, src: str, on_load: Callable[[], None]) -> Any:
        """
        Append an async ``<script>`` tag to the document head.

        ``on_load`` must be called once, when the browser fires ``load``.
        """

    @abstractmethod
    def get_global(self, name: str) -> Any:
        """Return the global object ``name`` (``Stripe``, ``paypal``...) or ``None``."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Current page URL."""

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Replace the current location. Nothing runs on this page afterwards."""


async def maybe_await(value: Any) -> Any:
    """SDK calls may answer synchronously or with a promise."""
    if inspect.isawaitable(value):
        return await value
    return value


def to_python(value: Any) -> Any:
    """Convert JS proxies (anything with ``to_py``) into Python containers."""
    to_py = getattr(value, "to_py", None)
    if callable(to_py):
        return to_py()
    return value
