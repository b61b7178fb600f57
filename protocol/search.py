"""Search-index lookup with a bounded history-scan fallback.

The chat's search index is built asynchronously and can lag minutes behind
writes, so a freshly sent card may be missing from search results. Each
lookup therefore runs as a small state machine:

    INDEXED   one keyword search, exact-parent filter
    SCANNING  newest-first history pages until enough cards, a short page,
              or the page ceiling
    DONE

Results keep discovery order (index first, then scan). Callers that need
chronological order sort by ``date`` themselves.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable

from config import (
    BOARD_SEARCH_LIMIT, THREAD_SEARCH_LIMIT, POST_SEARCH_LIMIT,
    SCAN_PAGE_SIZE, SCAN_MAX_PAGES,
)
from protocol.cards import (
    BOARD_TAG, THREAD_TAG, POST_TAG,
    BoardMeta, ThreadMeta, PostCard,
    board_from_message, thread_from_message, post_from_message,
)
from protocol.errors import TransportError
from transport.base import RawMessage, Transport
from transport.connection import ConnectionManager

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    INDEXED = "indexed"
    SCANNING = "scanning"
    DONE = "done"


@dataclass(frozen=True)
class CardQuery:
    """What to search for and how to recognise a hit."""

    tag: str
    reader: Callable[[RawMessage], Any]
    parent_id: str | None = None
    parent_of: Callable[[Any], str] | None = None

    @property
    def keywords(self) -> str:
        return f"{self.tag} {self.parent_id}" if self.parent_id else self.tag

    def match(self, msg: RawMessage) -> Any:
        entity = self.reader(msg)
        if entity is None:
            return None
        # keyword search is substring based: "abc" also hits "xabcx"
        if self.parent_id is not None and self.parent_of(entity) != self.parent_id:
            return None
        return entity


def board_query() -> CardQuery:
    return CardQuery(BOARD_TAG, board_from_message)


def thread_query(parent_board_id: str) -> CardQuery:
    return CardQuery(THREAD_TAG, thread_from_message, parent_board_id,
                     lambda t: t.parent_board_id)


def post_query(parent_thread_id: str) -> CardQuery:
    return CardQuery(POST_TAG, post_from_message, parent_thread_id,
                     lambda p: p.parent_thread_id)


class Reconciliation:
    def __init__(self, transport: Transport, peer: int, query: CardQuery, limit: int, *,
                 scan_page_size: int = SCAN_PAGE_SIZE, max_scan_pages: int = SCAN_MAX_PAGES):
        self.transport = transport
        self.peer = peer
        self.query = query
        self.limit = limit
        self.scan_page_size = scan_page_size
        self.max_scan_pages = max_scan_pages

        self.phase = Phase.INDEXED
        self.found: list = []
        self.seen: set[int] = set()
        self.indexed_count = 0
        self.pages_scanned = 0
        self._anchor = 0

    @property
    def satisfied(self) -> bool:
        return len(self.found) >= self.limit

    async def run(self) -> list:
        while self.phase is not Phase.DONE:
            if self.phase is Phase.INDEXED:
                await self._search_index()
            else:
                await self._scan_page()
        return self.found

    def _accept(self, msg: RawMessage) -> bool:
        if msg.id in self.seen:
            return False
        entity = self.query.match(msg)
        if entity is None:
            return False
        self.seen.add(msg.id)
        self.found.append(entity)
        return True

    async def _search_index(self) -> None:
        try:
            res = await self.transport.search_messages(self.peer, self.query.keywords, self.limit)
            messages = res.messages
        except TransportError as e:
            logger.warning("Search %r unavailable, scanning history instead: %s",
                           self.query.keywords, e)
            messages = []

        for msg in messages:
            self._accept(msg)
        self.indexed_count = len(self.found)

        if self.satisfied or self.max_scan_pages <= 0:
            self.phase = Phase.DONE
        else:
            self.phase = Phase.SCANNING

    async def _scan_page(self) -> None:
        try:
            page = await self.transport.fetch_history(self.peer, self._anchor, self.scan_page_size)
        except TransportError as e:
            logger.warning("History page after %s failed: %s", self._anchor, e)
            self.phase = Phase.DONE
            return
        self.pages_scanned += 1

        for msg in page:
            if self.satisfied:
                break
            self._accept(msg)

        if (self.satisfied
                or not page
                or len(page) < self.scan_page_size
                or self.pages_scanned >= self.max_scan_pages):
            logger.debug("Scan for %r done: %d indexed, %d total, %d pages",
                         self.query.keywords, self.indexed_count, len(self.found),
                         self.pages_scanned)
            self.phase = Phase.DONE
        else:
            self._anchor = min(m.id for m in page)


async def reconcile(conn: ConnectionManager, peer: int, query: CardQuery, limit: int,
                    **scan) -> list:
    transport = await conn.get()
    return await Reconciliation(transport, peer, query, limit, **scan).run()


async def search_boards(conn: ConnectionManager, peer: int,
                        limit: int = BOARD_SEARCH_LIMIT, **scan) -> list[BoardMeta]:
    return await reconcile(conn, peer, board_query(), limit, **scan)


async def search_threads(conn: ConnectionManager, peer: int, parent_board_id: str,
                         limit: int = THREAD_SEARCH_LIMIT, **scan) -> list[ThreadMeta]:
    return await reconcile(conn, peer, thread_query(parent_board_id), limit, **scan)


async def search_posts(conn: ConnectionManager, peer: int, parent_thread_id: str,
                       limit: int = POST_SEARCH_LIMIT, **scan) -> list[PostCard]:
    return await reconcile(conn, peer, post_query(parent_thread_id), limit, **scan)
