# handlers/posts.py
from __future__ import annotations

import logging

from aiogram import Router, F
from aiogram.filters import Command, CommandObject, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from config import POSTS_PAGE_SIZE
from protocol.errors import AmbiguousSendError, EditWindowExpired, TransportError
from protocol.forum import create_post, delete_post, get_post, edit_post
from protocol.pagination import fetch_page
from handlers.common import format_page, is_admin, pager_keyboard

posts_router = Router()


# ───── FSM
class EditPostState(StatesGroup):
    waiting_for_text = State()


def _parse_ref(args: str | None) -> tuple[str, int] | None:
    parts = (args or "").split()
    if len(parts) != 2:
        return None
    try:
        return parts[0], int(parts[1])
    except ValueError:
        return None


async def render_page(forum_conn, forum_peer, thread_id: str, page_number: int):
    page = await fetch_page(forum_conn, forum_peer, thread_id, page_number, POSTS_PAGE_SIZE)
    return format_page(f"Thread {thread_id}", page), pager_keyboard(thread_id, page)


# ──────────── /posts <thread_id> [page] ─────────────
@posts_router.message(Command("posts"))
async def cmd_posts(msg: Message, command: CommandObject, forum_conn, forum_peer):
    parts = (command.args or "").split()
    if not parts:
        return await msg.answer("Usage: /posts <thread_id> [page]")
    try:
        page_number = int(parts[1]) if len(parts) > 1 else 1
    except ValueError:
        page_number = 1
    text, kb = await render_page(forum_conn, forum_peer, parts[0], page_number)
    await msg.answer(text, reply_markup=kb)


@posts_router.callback_query(F.data.startswith("page:"))
async def turn_page(cb: CallbackQuery, forum_conn, forum_peer):
    _, thread_id, page_number = cb.data.split(":", 2)
    text, kb = await render_page(forum_conn, forum_peer, thread_id, int(page_number))
    await cb.message.edit_text(text, reply_markup=kb)
    await cb.answer()


@posts_router.callback_query(F.data == "noop")
async def noop(cb: CallbackQuery):
    await cb.answer()


# ──────────── /post <thread_id> text ─────────────
@posts_router.message(Command("post"))
async def cmd_post(msg: Message, command: CommandObject, forum_conn, forum_peer):
    thread_id, _, content = (command.args or "").partition(" ")
    thread_id = thread_id.strip()
    if not thread_id or not content.strip():
        return await msg.answer("Usage: /post <thread_id> text")
    try:
        post = await create_post(forum_conn, forum_peer, thread_id, content.strip())
    except AmbiguousSendError:
        return await msg.answer("⚠️ Telegram did not confirm the post. Check the thread before sending again.")
    except TransportError as e:
        logging.warning("post in %s failed: %s", thread_id, e)
        return await msg.answer("❌ Could not send the post.")
    await msg.answer(f"✅ Post #{post.message_id} submitted. It should become visible within a few minutes.")


# ──────────── /editpost <thread_id> <message_id> ─────────────
@posts_router.message(Command("editpost"))
async def cmd_editpost(msg: Message, command: CommandObject, state: FSMContext, forum_conn, forum_peer):
    ref = _parse_ref(command.args)
    if ref is None:
        return await msg.answer("Usage: /editpost <thread_id> <message_id>")
    post = await get_post(forum_conn, forum_peer, *ref)
    if not post:
        return await msg.answer("❌ Post not found.")

    await state.set_state(EditPostState.waiting_for_text)
    await state.update_data(thread_id=ref[0], message_id=ref[1], draft=post.content)
    await msg.answer(f"✏️ Send the new text for post #{post.message_id} (/cancel to stop).")


@posts_router.message(Command("cancel"))
async def cmd_cancel(msg: Message, state: FSMContext):
    await state.clear()
    await msg.answer("❌ Cancelled.")


@posts_router.message(StateFilter(EditPostState.waiting_for_text))
async def save_edit(msg: Message, state: FSMContext, forum_conn, forum_peer):
    raw = (msg.text or "").strip()
    if not raw:
        return await msg.answer("❌ Empty text.")

    data = await state.get_data()
    await state.update_data(draft=raw)
    post = await get_post(forum_conn, forum_peer, data["thread_id"], data["message_id"])
    if not post:
        await state.clear()
        return await msg.answer("⛔ Post not found.")

    try:
        await edit_post(forum_conn, forum_peer, post, raw)
    except EditWindowExpired:
        # stop editing, keep the draft
        await state.set_state(None)
        return await msg.answer("⌛ This post can no longer be edited (Telegram edit window expired). "
                                "Your text was kept.")
    except TransportError as e:
        logging.warning("editpost %s failed: %s", post.message_id, e)
        return await msg.answer("❌ Could not edit the post, try again.")

    await state.clear()
    await msg.answer("✅ Post updated.")


# ──────────── /delpost <thread_id> <message_id> ─────────────
@posts_router.message(Command("delpost"))
async def cmd_delpost(msg: Message, command: CommandObject, forum_conn, forum_peer):
    if not is_admin(msg.from_user.id):
        return await msg.answer("⛔ Admins only.")
    ref = _parse_ref(command.args)
    if ref is None:
        return await msg.answer("Usage: /delpost <thread_id> <message_id>")
    post = await get_post(forum_conn, forum_peer, *ref)
    if not post:
        return await msg.answer("❌ Post not found.")
    try:
        await delete_post(forum_conn, forum_peer, post)
    except TransportError as e:
        logging.warning("delpost %s failed: %s", post.message_id, e)
        return await msg.answer("❌ Could not delete the post.")
    await msg.answer("🗑️ Post deleted.")
