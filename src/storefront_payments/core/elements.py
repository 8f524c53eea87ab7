"""
Registry of mounted payment elements and SDK client handles.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = ["ElementRegistry"]


class ElementRegistry:
    """
    Holds one mounted input element and one SDK client per gateway key.

    Mounting again replaces the previous entry (last mount wins); the replaced
    handle is returned so callers can unmount or inspect it.
    """

    def __init__(self) -> None:
        self._elements: Dict[str, Any] = {}
        self._clients: Dict[str, Any] = {}

    def register(self, gateway: str, handle: Any) -> Optional[Any]:
        previous = self._elements.get(gateway)
        self._elements[gateway] = handle
        return previous

    def get(self, gateway: str) -> Optional[Any]:
        return self._elements.get(gateway)

    def register_client(self, gateway: str, client: Any) -> Optional[Any]:
        previous = self._clients.get(gateway)
        self._clients[gateway] = client
        return previous

    def client(self, gateway: str) -> Optional[Any]:
        return self._clients.get(gateway)

    def clear(self) -> None:
        self._elements.clear()
        self._clients.clear()
