"""Write path: publish, edit and retire cards.

None of these calls retry. A failed send may already be committed on the
server (``AmbiguousSendError``) and a blind retry would publish the card
twice; the caller has to ask the user.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from protocol.cards import (
    BoardMeta, ThreadMeta, PostCard,
    compose_board_card, compose_thread_card, compose_post_card,
)
from protocol.ids import generate_id
from protocol.search import search_boards, search_posts, search_threads
from transport.connection import ConnectionManager

logger = logging.getLogger(__name__)

ALBUM_SCAN_SIZE = 100


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("title must not be empty")
    return title


# ─────────────────────────────  boards  ─────────────────────────────
async def create_board(conn: ConnectionManager, peer: int, title: str,
                       description: str = "") -> BoardMeta:
    title = _clean_title(title)
    card_id = generate_id()
    transport = await conn.get()
    sent = await transport.send_plain_message(peer, compose_board_card(card_id, title, description))
    logger.info("Board %s published as message %s", card_id, sent.id)
    return BoardMeta(id=card_id, message_id=sent.id, title=title,
                     description=description or "",
                     creator_user_id=sent.author_user_id, date=sent.sent_at)


async def edit_board(conn: ConnectionManager, peer: int, board: BoardMeta, title: str,
                     description: str = "") -> BoardMeta:
    """Send the new card under the same permanent id, then drop the old message."""
    title = _clean_title(title)
    transport = await conn.get()
    sent = await transport.send_plain_message(peer, compose_board_card(board.id, title, description))
    if sent.id:
        await transport.delete_messages(peer, [board.message_id])
    logger.info("Board %s moved from message %s to %s", board.id, board.message_id, sent.id)
    return replace(board, message_id=sent.id, title=title, description=description or "",
                   date=sent.sent_at)


async def delete_board(conn: ConnectionManager, peer: int, board: BoardMeta) -> None:
    # threads stay behind as zombies
    transport = await conn.get()
    await transport.delete_messages(peer, [board.message_id])
    logger.info("Board %s deleted (message %s)", board.id, board.message_id)


async def find_board(conn: ConnectionManager, peer: int, board_id: str) -> BoardMeta | None:
    for board in await search_boards(conn, peer):
        if board.id == board_id:
            return board
    return None


# ─────────────────────────────  threads  ─────────────────────────────
async def create_thread(conn: ConnectionManager, peer: int, board_id: str, title: str) -> ThreadMeta:
    title = _clean_title(title)
    card_id = generate_id()
    transport = await conn.get()
    sent = await transport.send_plain_message(peer, compose_thread_card(card_id, board_id, title))
    logger.info("Thread %s in board %s published as message %s", card_id, board_id, sent.id)
    return ThreadMeta(id=card_id, parent_board_id=board_id, message_id=sent.id, title=title,
                      creator_user_id=sent.author_user_id, date=sent.sent_at)


async def edit_thread(conn: ConnectionManager, peer: int, thread: ThreadMeta, title: str) -> ThreadMeta:
    title = _clean_title(title)
    transport = await conn.get()
    sent = await transport.send_plain_message(
        peer, compose_thread_card(thread.id, thread.parent_board_id, title))
    if sent.id:
        await transport.delete_messages(peer, [thread.message_id])
    logger.info("Thread %s moved from message %s to %s", thread.id, thread.message_id, sent.id)
    return replace(thread, message_id=sent.id, title=title, date=sent.sent_at)


async def delete_thread(conn: ConnectionManager, peer: int, thread: ThreadMeta) -> None:
    transport = await conn.get()
    await transport.delete_messages(peer, [thread.message_id])
    logger.info("Thread %s deleted (message %s)", thread.id, thread.message_id)


async def list_threads(conn: ConnectionManager, peer: int, board_id: str) -> list[ThreadMeta]:
    threads = await search_threads(conn, peer, board_id)
    threads.sort(key=lambda t: t.date, reverse=True)
    return threads


async def find_thread(conn: ConnectionManager, peer: int, board_id: str,
                      thread_id: str) -> ThreadMeta | None:
    for thread in await search_threads(conn, peer, board_id):
        if thread.id == thread_id:
            return thread
    return None


# ─────────────────────────────  posts  ─────────────────────────────
async def create_post(conn: ConnectionManager, peer: int, thread_id: str, content: str) -> PostCard:
    card_id = generate_id()
    transport = await conn.get()
    sent = await transport.send_plain_message(peer, compose_post_card(card_id, thread_id, content))
    logger.info("Post %s in thread %s published as message %s", card_id, thread_id, sent.id)
    return PostCard(id=card_id, parent_thread_id=thread_id, message_id=sent.id, content=content,
                    from_user_id=sent.author_user_id, date=sent.sent_at)


async def edit_post(conn: ConnectionManager, peer: int, post: PostCard, content: str) -> PostCard:
    """In-place edit. ``EditWindowExpired`` propagates; there is no recreate fallback."""
    transport = await conn.get()
    text = compose_post_card(post.id, post.parent_thread_id, content)
    await transport.edit_message_text(peer, post.message_id, text)
    logger.info("Post %s edited in place (message %s)", post.id, post.message_id)
    return replace(post, content=content)


async def delete_post(conn: ConnectionManager, peer: int, post: PostCard) -> list[int]:
    transport = await conn.get()
    ids = [post.message_id]
    if post.grouped_id:
        # album siblings are only looked up in the newest history page
        for msg in await transport.fetch_history(peer, 0, ALBUM_SCAN_SIZE):
            if msg.grouped_id == post.grouped_id and msg.id not in ids:
                ids.append(msg.id)
    await transport.delete_messages(peer, ids)
    logger.info("Post %s deleted (messages %s)", post.id, ids)
    return ids


async def get_post(conn: ConnectionManager, peer: int, thread_id: str,
                   message_id: int) -> PostCard | None:
    for post in await search_posts(conn, peer, thread_id):
        if post.message_id == message_id:
            return post
    return None
