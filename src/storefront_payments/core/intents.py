"""
Payment intent lifecycle backed by the vault.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from .errors import GatewayError, VaultError
from .models import Intent
from .services import RequestClient

__all__ = ["IntentLifecycle"]


class IntentLifecycle:
    """
    Creates and updates intents, and fetches one-time gateway authorizations.
    """

    def __init__(self, vault: RequestClient) -> None:
        self.vault = vault

    async def _intent_request(self, method: str, data: Mapping[str, Any]) -> Intent:
        payload = await asyncio.to_thread(self.vault.request, method, "/intent", dict(data))
        payload = payload or {}
        if payload.get("errors"):
            raise VaultError.from_errors(payload["errors"])
        return Intent.from_response(payload)

    async def create(self, data: Mapping[str, Any]) -> Intent:
        return await self._intent_request("post", data)

    async def update(self, data: Mapping[str, Any]) -> Intent:
        return await self._intent_request("put", data)

    async def authorize(self, gateway: str) -> Any:
        authorization = await asyncio.to_thread(
            self.vault.request, "post", "/authorization", {"gateway": gateway}
        )
        if isinstance(authorization, Mapping) and authorization.get("error"):
            raise GatewayError(str(authorization["error"]), code="authorization_error")
        return authorization
