"""“Last activity” lookups built on top of the reconciling searches."""
from __future__ import annotations

import asyncio
from typing import Iterable

from config import BOARD_ACTIVITY_THREADS
from protocol.cards import PostCard
from protocol.search import search_posts, search_threads
from transport.connection import ConnectionManager


def newest(posts: Iterable[PostCard | None]) -> PostCard | None:
    # second-resolution dates: ties resolve to whichever comes first
    best = None
    for p in posts:
        if p is not None and (best is None or p.date > best.date):
            best = p
    return best


async def last_post_for_thread(conn: ConnectionManager, peer: int, thread_id: str) -> PostCard | None:
    return newest(await search_posts(conn, peer, thread_id))


async def last_posts_for_threads(conn: ConnectionManager, peer: int,
                                 thread_ids: Iterable[str]) -> dict[str, PostCard | None]:
    """One concurrent lookup per thread; each branch owns its own key."""
    ids = list(dict.fromkeys(thread_ids))
    results = await asyncio.gather(*(last_post_for_thread(conn, peer, tid) for tid in ids))
    return dict(zip(ids, results))


async def last_post_for_board(conn: ConnectionManager, peer: int, board_id: str,
                              max_threads: int = BOARD_ACTIVITY_THREADS) -> PostCard | None:
    """Newest post across the board's ``max_threads`` newest threads.

    Older threads are not looked at, so a board with more threads than that
    can report a stale last activity.
    """
    threads = await search_threads(conn, peer, board_id)
    threads.sort(key=lambda t: t.date, reverse=True)
    by_thread = await last_posts_for_threads(conn, peer, (t.id for t in threads[:max_threads]))
    return newest(by_thread.values())
