"""
Memoized loader for third-party SDK scripts.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .page import Page

__all__ = ["ScriptHandle", "ScriptLoader"]


@dataclass
class ScriptHandle:
    id: str
    src: str
    pending_load: Optional["asyncio.Future[None]"] = None


class ScriptLoader:
    """
    Injects each SDK script at most once while a load is in flight.

    Concurrent callers for the same id share one future. Once the script has
    loaded the entry is dropped, so later callers decide by checking the SDK
    global (see :meth:`require`) rather than the cache. A script whose load
    event never fires leaves its callers waiting; there is no timeout.
    """

    def __init__(self, page: Page) -> None:
        self.page = page
        self._handles: Dict[str, ScriptHandle] = {}

    def pending(self, script_id: str) -> Optional[ScriptHandle]:
        return self._handles.get(script_id)

    def ensure(self, script_id: str, src: str) -> "asyncio.Future[None]":
        handle = self._handles.get(script_id)
        if handle is not None and handle.pending_load is not None:
            return handle.pending_load

        future: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()
        self._handles[script_id] = ScriptHandle(id=script_id, src=src, pending_load=future)

        def _on_load() -> None:
            if not future.done():
                future.set_result(None)
            current = self._handles.get(script_id)
            if current is not None and current.pending_load is future:
                del self._handles[script_id]

        logging.info("Loading script %s from %s", script_id, src)
        self.page.append_script(script_id, src, _on_load)
        return future

    async def require(self, script_id: str, src: str, global_name: str) -> None:
        """Load ``src`` unless the page already exposes ``global_name``."""
        if self.page.get_global(global_name) is None:
            await self.ensure(script_id, src)
