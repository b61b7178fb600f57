"""Board, thread and post cards.

A card is the whole text of one chat message::

    <type-tag>
    <permanent-id>
    parent:<parent-id>      (threads and posts only)
    <JSON payload, possibly spanning several lines>

Parsers never raise: anything that is not a well-formed card of the expected
type yields None, because the chat also carries ordinary messages.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from protocol.escape import escape, unescape
from transport.base import RawMessage

BOARD_TAG = "fg.metadata.board"
THREAD_TAG = "fg.metadata.thread"
POST_TAG = "fg.post"
PARENT_PREFIX = "parent:"


@dataclass
class ParsedCard:
    id: str
    data: dict
    parent_id: str | None = None


@dataclass
class BoardMeta:
    id: str
    message_id: int
    title: str
    description: str = ""
    creator_user_id: int | None = None
    date: int = 0


@dataclass
class ThreadMeta:
    id: str
    parent_board_id: str
    message_id: int
    title: str
    creator_user_id: int | None = None
    date: int = 0


@dataclass
class PostCard:
    id: str
    parent_thread_id: str
    message_id: int
    content: str
    from_user_id: int | None = None
    date: int = 0
    media: Any = field(default=None, repr=False)
    grouped_id: str | None = None


# ─────────────────────────────  framing  ─────────────────────────────
def _dump(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _frame(tag: str, card_id: str, parent_id: str | None, payload: dict) -> str:
    lines = [tag, card_id]
    if parent_id is not None:
        lines.append(f"{PARENT_PREFIX}{parent_id}")
    lines.append(_dump(payload))
    return "\n".join(lines)


def _unframe(text: str, tag: str, with_parent: bool) -> tuple[str, str | None, dict] | None:
    lines = (text or "").split("\n")
    header = 3 if with_parent else 2
    if len(lines) < header + 1 or lines[0] != tag:
        return None
    card_id = lines[1].strip()
    if not card_id:
        return None

    parent_id = None
    if with_parent:
        parent_line = lines[2]
        if not parent_line.startswith(PARENT_PREFIX):
            return None
        parent_id = parent_line[len(PARENT_PREFIX):].strip()
        if not parent_id:
            return None

    try:
        payload = json.loads("\n".join(lines[header:]))
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return card_id, parent_id, payload


# ─────────────────────────────  boards  ─────────────────────────────
def compose_board_card(card_id: str, title: str, description: str | None = None) -> str:
    return _frame(BOARD_TAG, card_id, None, {"title": title, "description": description or ""})


def parse_board_card(text: str) -> ParsedCard | None:
    parts = _unframe(text, BOARD_TAG, with_parent=False)
    if parts is None:
        return None
    card_id, _, payload = parts
    title = payload.get("title")
    description = payload.get("description")
    if not isinstance(title, str):
        return None
    if description is not None and not isinstance(description, str):
        return None
    return ParsedCard(id=card_id, data={"title": title, "description": description or ""})


# ─────────────────────────────  threads  ─────────────────────────────
def compose_thread_card(card_id: str, parent_board_id: str, title: str) -> str:
    return _frame(THREAD_TAG, card_id, parent_board_id, {"title": title})


def parse_thread_card(text: str) -> ParsedCard | None:
    parts = _unframe(text, THREAD_TAG, with_parent=True)
    if parts is None:
        return None
    card_id, parent_id, payload = parts
    title = payload.get("title")
    if not isinstance(title, str):
        return None
    return ParsedCard(id=card_id, parent_id=parent_id, data={"title": title})


# ─────────────────────────────  posts  ─────────────────────────────
def compose_post_card(card_id: str, parent_thread_id: str, content: str) -> str:
    # only the escaped form ever goes over the wire
    return _frame(POST_TAG, card_id, parent_thread_id, {"content": escape(content)})


def parse_post_card(text: str) -> ParsedCard | None:
    parts = _unframe(text, POST_TAG, with_parent=True)
    if parts is None:
        return None
    card_id, parent_id, payload = parts
    content = payload.get("content")
    if not isinstance(content, str):
        return None
    return ParsedCard(id=card_id, parent_id=parent_id, data={"content": unescape(content)})


# ─────────────────────────────  message → entity  ─────────────────────────────
def board_from_message(msg: RawMessage) -> BoardMeta | None:
    card = parse_board_card(msg.raw_text)
    if card is None:
        return None
    return BoardMeta(
        id=card.id,
        message_id=msg.id,
        title=card.data["title"],
        description=card.data["description"],
        creator_user_id=msg.author_user_id,
        date=msg.sent_at,
    )


def thread_from_message(msg: RawMessage) -> ThreadMeta | None:
    card = parse_thread_card(msg.raw_text)
    if card is None:
        return None
    return ThreadMeta(
        id=card.id,
        parent_board_id=card.parent_id,
        message_id=msg.id,
        title=card.data["title"],
        creator_user_id=msg.author_user_id,
        date=msg.sent_at,
    )


def post_from_message(msg: RawMessage) -> PostCard | None:
    card = parse_post_card(msg.raw_text)
    if card is None:
        return None
    return PostCard(
        id=card.id,
        parent_thread_id=card.parent_id,
        message_id=msg.id,
        content=card.data["content"],
        from_user_id=msg.author_user_id,
        date=msg.sent_at,
        media=msg.media,
        grouped_id=msg.grouped_id,
    )
