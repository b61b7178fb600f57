from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence


@dataclass
class RawMessage:
    """Canonical message record. Built only by ``transport.adapter``."""

    id: int
    raw_text: str
    author_user_id: int | None = None
    sent_at: int = 0                      # epoch seconds
    media: Any = None
    grouped_id: str | None = None


@dataclass
class SearchResult:
    messages: list[RawMessage] = field(default_factory=list)
    approx_count: int = 0


class Transport:
    """Peer-addressed message store the forum rides on.

    Every method either returns or raises ``protocol.errors.TransportError``
    (or one of its subclasses).
    """

    async def send_plain_message(self, peer: int, text: str) -> RawMessage:
        raise NotImplementedError

    async def edit_message_text(self, peer: int, message_id: int, text: str) -> RawMessage:
        raise NotImplementedError

    async def delete_messages(self, peer: int, message_ids: Sequence[int]) -> None:
        raise NotImplementedError

    async def search_messages(self, peer: int, query: str, limit: int,
                              add_offset: int = 0) -> SearchResult:
        raise NotImplementedError

    async def fetch_history(self, peer: int, anchor_message_id: int,
                            page_size: int) -> list[RawMessage]:
        """Newest-first page of messages strictly older than the anchor (0 = newest)."""
        raise NotImplementedError

    async def count_messages(self, peer: int, query: str) -> int:
        res = await self.search_messages(peer, query, limit=0)
        return res.approx_count
