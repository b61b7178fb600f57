"""Page-numbered access to a thread's posts.

The transport only offers "count" and "K messages at offset N from the
newest end", while pages are numbered oldest-first. Page ``p`` of ``P`` is
located by its distance from the newest end; the last page is the short
one, so every older page sits ``last_len + (P - 1 - p) * size`` messages
back.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from config import POSTS_PAGE_SIZE
from protocol.cards import PostCard
from protocol.errors import TransportError
from protocol.search import post_query
from transport.connection import ConnectionManager

logger = logging.getLogger(__name__)


@dataclass
class Page:
    items: list[PostCard] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 1
    page_number: int = 1
    page_size: int = POSTS_PAGE_SIZE

    @property
    def first_page(self) -> int:
        return 1

    @property
    def last_page(self) -> int:
        return self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def prev_page(self) -> int:
        return max(1, self.page_number - 1)

    @property
    def next_page(self) -> int:
        return min(self.total_pages, self.page_number + 1)


def total_pages_for(total_count: int, page_size: int) -> int:
    return max(1, math.ceil(max(0, total_count) / page_size))


def clamp_page(page_number: int, total_pages: int) -> int:
    return min(max(1, page_number), total_pages)


def page_window(page_number: int, page_size: int, total_count: int) -> tuple[int, int]:
    """(add_offset, limit) of an already clamped page, offset from the newest end."""
    total_pages = total_pages_for(total_count, page_size)
    last_len = max(0, total_count - page_size * (total_pages - 1))
    if page_number == total_pages:
        return 0, last_len
    return last_len + (total_pages - 1 - page_number) * page_size, page_size


async def fetch_page(conn: ConnectionManager, peer: int, parent_thread_id: str,
                     page_number: int = 1, page_size: int = POSTS_PAGE_SIZE) -> Page:
    if page_size < 1:
        raise ValueError("page_size must be positive")

    transport = await conn.get()
    query = post_query(parent_thread_id)

    try:
        total_count = max(0, int(await transport.count_messages(peer, query.keywords)))
    except TransportError as e:
        logger.warning("Count for %r unavailable: %s", query.keywords, e)
        total_count = 0

    total_pages = total_pages_for(total_count, page_size)
    page_number = clamp_page(page_number, total_pages)
    page = Page(total_count=total_count, total_pages=total_pages,
                page_number=page_number, page_size=page_size)

    add_offset, limit = page_window(page_number, page_size, total_count)
    if limit == 0:
        return page

    try:
        res = await transport.search_messages(peer, query.keywords, limit, add_offset=add_offset)
    except TransportError as e:
        logger.warning("Page %d of %r unavailable: %s", page_number, query.keywords, e)
        return page

    seen = set()
    for msg in res.messages:
        if msg.id in seen:
            continue
        post = query.match(msg)
        if post is not None:
            seen.add(msg.id)
            page.items.append(post)
    # transport order inside a page is not guaranteed
    page.items.sort(key=lambda p: (p.date, p.message_id))
    return page
