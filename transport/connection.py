from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from transport.base import Transport

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Lazily connected transport shared by every protocol call.

    ``factory`` is awaited at most once per successful connection; callers
    arriving while it runs wait for the same attempt. A failed attempt is
    not cached, the next ``get()`` tries again.
    """

    def __init__(self, factory: Callable[[], Awaitable[Transport]]):
        self._factory = factory
        self._transport: Transport | None = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._transport is not None

    async def get(self) -> Transport:
        if self._transport is not None:
            return self._transport
        async with self._lock:
            if self._transport is None:
                logger.info("Connecting transport")
                self._transport = await self._factory()
        return self._transport

    async def reset(self) -> None:
        async with self._lock:
            transport, self._transport = self._transport, None
        close = getattr(transport, "close", None)
        if close is not None:
            await close()
