"""Transport over the Telegram Bot API (aiogram).

Bots can send, edit and delete but cannot search or read chat history, so
search and history are answered from the ``MessageStore`` mirror. Cards the
bot sends are mirrored immediately; messages from members arrive through
the mirror router in ``handlers.mirror``.
"""
from __future__ import annotations

import logging
from typing import Sequence

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest, TelegramNetworkError
from sqlalchemy.exc import SQLAlchemyError

from database.utils import MessageStore
from protocol.errors import AmbiguousSendError, EditWindowExpired, TransportError
from transport.adapter import normalize_message
from transport.base import RawMessage, SearchResult, Transport

logger = logging.getLogger(__name__)

_EDIT_EXPIRED_MARKERS = ("message can't be edited", "message_edit_time_expired")


def is_edit_window_error(err: TelegramAPIError) -> bool:
    text = (err.message or "").lower()
    return any(marker in text for marker in _EDIT_EXPIRED_MARKERS)


class BotApiTransport(Transport):
    def __init__(self, bot: Bot, store: MessageStore):
        self.bot = bot
        self.store = store

    async def send_plain_message(self, peer: int, text: str) -> RawMessage:
        try:
            # parse_mode=None : the card must reach the chat byte for byte
            sent = await self.bot.send_message(peer, text, parse_mode=None)
        except TelegramNetworkError as e:
            logger.warning("Send to %s failed mid-flight: %s", peer, e)
            raise AmbiguousSendError(f"send to {peer} may or may not have happened: {e}") from e
        except TelegramAPIError as e:
            raise TransportError(str(e)) from e
        try:
            return await self.store.record(peer, sent)
        except SQLAlchemyError as e:
            # posted but not mirrored: invisible to search until re-recorded
            logger.error("Message %s sent to %s but not mirrored: %s",
                         getattr(sent, "message_id", "?"), peer, e)
            raise AmbiguousSendError(f"sent to {peer} but not recorded: {e}") from e

    async def edit_message_text(self, peer: int, message_id: int, text: str) -> RawMessage:
        try:
            res = await self.bot.edit_message_text(
                text=text, chat_id=peer, message_id=message_id, parse_mode=None,
            )
        except TelegramBadRequest as e:
            if is_edit_window_error(e):
                raise EditWindowExpired(str(e)) from e
            raise TransportError(str(e)) from e
        except TelegramAPIError as e:
            raise TransportError(str(e)) from e

        msg = normalize_message(res) if not isinstance(res, bool) else None
        try:
            if msg is not None:
                return await self.store.record(peer, msg)
            await self.store.update_text(peer, message_id, text)
            return await self.store.get(peer, message_id) or RawMessage(id=message_id, raw_text=text)
        except SQLAlchemyError as e:
            raise TransportError(f"edit of {message_id} not mirrored: {e}") from e

    async def delete_messages(self, peer: int, message_ids: Sequence[int]) -> None:
        ids = list(message_ids)
        if not ids:
            return
        try:
            await self.bot.delete_messages(peer, ids)
        except TelegramAPIError as e:
            raise TransportError(str(e)) from e
        try:
            await self.store.forget(peer, ids)
        except SQLAlchemyError as e:
            raise TransportError(f"deleted {ids} but mirror kept them: {e}") from e

    async def search_messages(self, peer: int, query: str, limit: int,
                              add_offset: int = 0) -> SearchResult:
        try:
            return await self.store.search(peer, query, limit, add_offset)
        except SQLAlchemyError as e:
            raise TransportError(f"search failed: {e}") from e

    async def count_messages(self, peer: int, query: str) -> int:
        try:
            return await self.store.count(peer, query)
        except SQLAlchemyError as e:
            raise TransportError(f"count failed: {e}") from e

    async def fetch_history(self, peer: int, anchor_message_id: int,
                            page_size: int) -> list[RawMessage]:
        try:
            return await self.store.history(peer, anchor_message_id, page_size)
        except SQLAlchemyError as e:
            raise TransportError(f"history failed: {e}") from e

    async def close(self) -> None:
        await self.bot.session.close()
