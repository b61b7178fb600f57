# handlers/boards.py
from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from aiogram.utils.markdown import hbold, hitalic

from protocol.errors import AmbiguousSendError, TransportError
from protocol.forum import create_board, delete_board, edit_board, find_board
from protocol.search import search_boards
from handlers.common import card_ref, is_admin

boards_router = Router()


def split_title(raw: str | None) -> tuple[str, str]:
    """Split "Title | description" into its two parts."""
    title, _, description = (raw or "").partition("|")
    return title.strip(), description.strip()


# ──────────── /boards ─────────────
@boards_router.message(Command("boards"))
async def cmd_boards(msg: Message, forum_conn, forum_peer):
    boards = await search_boards(forum_conn, forum_peer)
    if not boards:
        return await msg.answer("No boards yet. Create one with /newboard Title | description")

    boards.sort(key=lambda b: b.date, reverse=True)
    lines = []
    for b in boards:
        line = f"• {hbold(b.title)} {card_ref(b.id)}"
        if b.description:
            line += f"\n  {hitalic(b.description)}"
        lines.append(line)
    await msg.answer("\n".join(lines))


# ──────────── /newboard Title | description ─────────────
@boards_router.message(Command("newboard"))
async def cmd_newboard(msg: Message, command: CommandObject, forum_conn, forum_peer):
    title, description = split_title(command.args)
    if not title:
        return await msg.answer("Usage: /newboard Title | description")
    try:
        board = await create_board(forum_conn, forum_peer, title, description)
    except AmbiguousSendError:
        return await msg.answer("⚠️ Telegram did not confirm the board. Check /boards before trying again.")
    except TransportError as e:
        logging.warning("newboard failed: %s", e)
        return await msg.answer("❌ Could not create the board.")
    await msg.answer(f"✅ Board {hbold(board.title)} created: {card_ref(board.id)}")


# ──────────── /editboard <id> Title | description ─────────────
@boards_router.message(Command("editboard"))
async def cmd_editboard(msg: Message, command: CommandObject, forum_conn, forum_peer):
    if not is_admin(msg.from_user.id):
        return await msg.answer("⛔ Admins only.")
    board_id, _, rest = (command.args or "").strip().partition(" ")
    title, description = split_title(rest)
    if not board_id or not title:
        return await msg.answer("Usage: /editboard <board_id> Title | description")

    board = await find_board(forum_conn, forum_peer, board_id)
    if not board:
        return await msg.answer("❌ Board not found.")
    try:
        board = await edit_board(forum_conn, forum_peer, board, title, description)
    except AmbiguousSendError:
        return await msg.answer("⚠️ Telegram did not confirm the update. Check /boards before trying again.")
    except TransportError as e:
        logging.warning("editboard %s failed: %s", board_id, e)
        return await msg.answer("❌ Could not update the board.")
    await msg.answer(f"✅ Board {card_ref(board.id)} updated.")


# ──────────── /delboard <id> ─────────────
@boards_router.message(Command("delboard"))
async def cmd_delboard(msg: Message, command: CommandObject, forum_conn, forum_peer):
    if not is_admin(msg.from_user.id):
        return await msg.answer("⛔ Admins only.")
    board_id = (command.args or "").strip()
    board = await find_board(forum_conn, forum_peer, board_id) if board_id else None
    if not board:
        return await msg.answer("❌ Board not found.")
    try:
        await delete_board(forum_conn, forum_peer, board)
    except TransportError as e:
        logging.warning("delboard %s failed: %s", board_id, e)
        return await msg.answer("❌ Could not delete the board.")
    await msg.answer("🗑️ Board deleted. Its threads stay readable.")
