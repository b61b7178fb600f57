from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Any, Iterable

from sqlalchemy import select, delete, func

from database.database import async_session
from database.message import MirroredMessage
from transport.adapter import normalize_message, normalize_messages
from transport.base import RawMessage, SearchResult


def _file_id(media: Any) -> str | None:
    if media is None:
        return None
    if isinstance(media, str):
        return media
    if isinstance(media, (list, tuple)):
        # aiogram photo = list of sizes, biggest last
        media = media[-1] if media else None
    return getattr(media, "file_id", None)


class MessageStore:
    """Mirror of one or more group chats: searchable, pageable newest-first."""

    def __init__(self, session_factory=async_session):
        self.session_factory = session_factory

    # ───────────────────────────────  SESSION  ────────────────────────────────
    @asynccontextmanager
    async def session(self):
        async with self.session_factory() as ses:
            try:
                yield ses
            finally:
                await ses.close()

    # ───────────────────────────────  ÉCRITURE  ───────────────────────────────
    async def record(self, chat_id: int, message: Any) -> RawMessage | None:
        msg = normalize_message(message)
        if msg is None:
            return None
        async with self.session() as ses:
            await ses.merge(MirroredMessage(
                chat_id=chat_id,
                message_id=msg.id,
                author_id=msg.author_user_id,
                date=msg.sent_at,
                text=msg.raw_text,
                grouped_id=msg.grouped_id,
                media_file_id=_file_id(msg.media),
            ))
            await ses.commit()
        return msg

    async def update_text(self, chat_id: int, message_id: int, text: str) -> None:
        async with self.session() as ses:
            row = await ses.get(MirroredMessage, (chat_id, message_id))
            if row is not None:
                row.text = text
                await ses.commit()

    async def forget(self, chat_id: int, message_ids: Iterable[int]) -> None:
        ids = list(message_ids)
        if not ids:
            return
        async with self.session() as ses:
            await ses.execute(delete(MirroredMessage).where(
                MirroredMessage.chat_id == chat_id,
                MirroredMessage.message_id.in_(ids),
            ))
            await ses.commit()

    # ───────────────────────────────  LECTURE  ────────────────────────────────
    def _matching(self, chat_id: int, query: str):
        # substring match on every keyword, like Telegram's own search
        conds = [MirroredMessage.chat_id == chat_id]
        for term in query.split():
            conds.append(MirroredMessage.text.contains(term, autoescape=True))
        return conds

    async def get(self, chat_id: int, message_id: int) -> RawMessage | None:
        async with self.session() as ses:
            return normalize_message(await ses.get(MirroredMessage, (chat_id, message_id)))

    async def count(self, chat_id: int, query: str) -> int:
        async with self.session() as ses:
            n = await ses.scalar(
                select(func.count()).select_from(MirroredMessage).where(*self._matching(chat_id, query))
            )
            return n or 0

    async def search(self, chat_id: int, query: str, limit: int, offset: int = 0) -> SearchResult:
        total = await self.count(chat_id, query)
        if limit <= 0:
            return SearchResult(messages=[], approx_count=total)
        async with self.session() as ses:
            rows = (await ses.scalars(
                select(MirroredMessage)
                .where(*self._matching(chat_id, query))
                .order_by(MirroredMessage.message_id.desc())
                .offset(max(0, offset))
                .limit(limit)
            )).all()
        return SearchResult(messages=normalize_messages(rows), approx_count=total)

    async def history(self, chat_id: int, anchor_message_id: int, limit: int) -> list[RawMessage]:
        stmt = select(MirroredMessage).where(MirroredMessage.chat_id == chat_id)
        if anchor_message_id:
            stmt = stmt.where(MirroredMessage.message_id < anchor_message_id)
        stmt = stmt.order_by(MirroredMessage.message_id.desc()).limit(max(0, limit))
        async with self.session() as ses:
            rows = (await ses.scalars(stmt)).all()
        return normalize_messages(rows)
