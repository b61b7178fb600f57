# handlers/common.py
from __future__ import annotations

import time

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.markdown import hbold, hcode, hitalic
from aiogram.utils.text_decorations import html_decoration

from config import ADMINS
from protocol.cards import PostCard
from protocol.pagination import Page

MISSING_BOARD = "(deleted board)"
PREVIEW_LEN = 300

_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


def is_admin(user_id: int) -> bool:
    return user_id in ADMINS


def format_time_since(epoch: int | None, now: float | None = None) -> str:
    if not epoch or epoch <= 0:
        return ""
    now = time.time() if now is None else now
    diff = max(0, int(now - epoch))
    for name, seconds in _UNITS:
        amount = diff // seconds
        if amount >= 1:
            return f"{amount} {name}{'' if amount == 1 else 's'} ago"
    return "just now"


def format_post(post: PostCard) -> str:
    body = post.content if len(post.content) <= PREVIEW_LEN else post.content[:PREVIEW_LEN] + "…"
    return (
        f"#{post.message_id} · {format_time_since(post.date)}\n"
        f"{html_decoration.quote(body)}"
    )


def format_page(title: str, page: Page) -> str:
    header = f"{hbold(title)} · page {page.page_number}/{page.total_pages}"
    if not page.items:
        return f"{header}\n\n{hitalic('No posts yet.')}"
    return header + "\n\n" + "\n\n".join(format_post(p) for p in page.items)


def pager_keyboard(thread_id: str, page: Page) -> InlineKeyboardMarkup | None:
    if page.total_pages <= 1:
        return None
    row: list[InlineKeyboardButton] = []
    if page.has_prev:
        row.append(InlineKeyboardButton(text="⏮", callback_data=f"page:{thread_id}:{page.first_page}"))
        row.append(InlineKeyboardButton(text="◀️", callback_data=f"page:{thread_id}:{page.prev_page}"))
    row.append(InlineKeyboardButton(text=f"{page.page_number}/{page.total_pages}", callback_data="noop"))
    if page.has_next:
        row.append(InlineKeyboardButton(text="▶️", callback_data=f"page:{thread_id}:{page.next_page}"))
        row.append(InlineKeyboardButton(text="⏭", callback_data=f"page:{thread_id}:{page.last_page}"))
    return InlineKeyboardMarkup(inline_keyboard=[row])


def card_ref(card_id: str) -> str:
    return hcode(card_id)
