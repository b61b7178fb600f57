# handlers/threads.py
from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from aiogram.utils.markdown import hbold

from protocol.activity import last_posts_for_threads
from protocol.errors import AmbiguousSendError, TransportError
from protocol.forum import (
    create_thread, delete_thread, edit_thread, find_board, find_thread, list_threads,
)
from handlers.common import MISSING_BOARD, card_ref, format_time_since, is_admin

threads_router = Router()


# ──────────── /threads <board_id> ─────────────
@threads_router.message(Command("threads"))
async def cmd_threads(msg: Message, command: CommandObject, forum_conn, forum_peer):
    board_id = (command.args or "").strip()
    if not board_id:
        return await msg.answer("Usage: /threads <board_id>")

    board = await find_board(forum_conn, forum_peer, board_id)
    threads = await list_threads(forum_conn, forum_peer, board_id)
    title = board.title if board else MISSING_BOARD
    if not threads:
        return await msg.answer(f"{hbold(title)}\n\nNo threads yet. /newthread {board_id} Title")

    last = await last_posts_for_threads(forum_conn, forum_peer, [t.id for t in threads])
    lines = [hbold(title), ""]
    for t in threads:
        lp = last.get(t.id)
        activity = format_time_since(lp.date) if lp else "no posts"
        lines.append(f"• {hbold(t.title)} {card_ref(t.id)} · {activity}")
    await msg.answer("\n".join(lines))


# ──────────── /newthread <board_id> Title ─────────────
@threads_router.message(Command("newthread"))
async def cmd_newthread(msg: Message, command: CommandObject, forum_conn, forum_peer):
    board_id, _, title = (command.args or "").strip().partition(" ")
    if not board_id or not title.strip():
        return await msg.answer("Usage: /newthread <board_id> Title")
    try:
        thread = await create_thread(forum_conn, forum_peer, board_id, title)
    except AmbiguousSendError:
        return await msg.answer("⚠️ Telegram did not confirm the thread. Check /threads before trying again.")
    except TransportError as e:
        logging.warning("newthread in %s failed: %s", board_id, e)
        return await msg.answer("❌ Could not create the thread.")
    await msg.answer(f"✅ Thread {hbold(thread.title)} created: {card_ref(thread.id)}")


# ──────────── /editthread <board_id> <thread_id> Title ─────────────
@threads_router.message(Command("editthread"))
async def cmd_editthread(msg: Message, command: CommandObject, forum_conn, forum_peer):
    if not is_admin(msg.from_user.id):
        return await msg.answer("⛔ Admins only.")
    parts = (command.args or "").split(maxsplit=2)
    if len(parts) != 3:
        return await msg.answer("Usage: /editthread <board_id> <thread_id> Title")

    thread = await find_thread(forum_conn, forum_peer, parts[0], parts[1])
    if not thread:
        return await msg.answer("❌ Thread not found.")
    try:
        thread = await edit_thread(forum_conn, forum_peer, thread, parts[2])
    except AmbiguousSendError:
        return await msg.answer("⚠️ Telegram did not confirm the update. Check /threads before trying again.")
    except TransportError as e:
        logging.warning("editthread %s failed: %s", thread.id, e)
        return await msg.answer("❌ Could not update the thread.")
    await msg.answer(f"✅ Thread {hbold(thread.title)} renamed.")


# ──────────── /delthread <board_id> <thread_id> ─────────────
@threads_router.message(Command("delthread"))
async def cmd_delthread(msg: Message, command: CommandObject, forum_conn, forum_peer):
    if not is_admin(msg.from_user.id):
        return await msg.answer("⛔ Admins only.")
    parts = (command.args or "").split()
    if len(parts) != 2:
        return await msg.answer("Usage: /delthread <board_id> <thread_id>")

    thread = await find_thread(forum_conn, forum_peer, parts[0], parts[1])
    if not thread:
        return await msg.answer("❌ Thread not found.")
    try:
        await delete_thread(forum_conn, forum_peer, thread)
    except TransportError as e:
        logging.warning("delthread %s failed: %s", thread.id, e)
        return await msg.answer("❌ Could not delete the thread.")
    await msg.answer("🗑️ Thread deleted. Its posts remain as zombie messages.")
