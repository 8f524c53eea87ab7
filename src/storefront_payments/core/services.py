"""
Async access to the cart and store settings.

The underlying HTTP clients block, so each call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional, Protocol

from .models import PaymentMethods

__all__ = ["CartService", "RequestClient", "SettingsService"]


class RequestClient(Protocol):
    def request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        ...


class CartService:
    def __init__(self, api: RequestClient) -> None:
        self.api = api

    async def get(self) -> Optional[Dict[str, Any]]:
        cart = await asyncio.to_thread(self.api.request, "get", "/cart")
        return cart or None

    async def update(self, patch: Mapping[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(self.api.request, "put", "/cart", dict(patch))


class SettingsService:
    def __init__(self, api: RequestClient) -> None:
        self.api = api
        self._payments: Optional[PaymentMethods] = None

    async def get(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self.api.request, "get", "/settings") or {}

    async def payments(self, *, refresh: bool = False) -> PaymentMethods:
        if self._payments is None or refresh:
            payload = await asyncio.to_thread(self.api.request, "get", "/settings/payments")
            self._payments = PaymentMethods.from_response(payload)
        return self._payments

    def clear(self) -> None:
        self._payments = None
