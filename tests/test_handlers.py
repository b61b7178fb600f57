import asyncio
from unittest.mock import AsyncMock, MagicMock

from aiogram.filters import CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from handlers.boards import split_title
from handlers.common import format_time_since, pager_keyboard
from handlers.posts import EditPostState, _parse_ref, cmd_editpost, cmd_post, cmd_posts, save_edit
from protocol.cards import compose_post_card
from protocol.errors import AmbiguousSendError
from protocol.pagination import Page
from tests.fakes import PEER

TWO_DAYS = 48 * 3600


def make_state():
    return FSMContext(storage=MemoryStorage(), key=StorageKey(bot_id=1, chat_id=PEER, user_id=7))


def make_msg(text=None):
    msg = MagicMock()
    msg.text = text
    msg.answer = AsyncMock()
    return msg


def answered(msg):
    return msg.answer.await_args.args[0]


def test_parse_ref():
    assert _parse_ref("t1 42") == ("t1", 42)
    assert _parse_ref("t1") is None
    assert _parse_ref("t1 x") is None
    assert _parse_ref("t1 ²") is None
    assert _parse_ref(None) is None


def test_split_title():
    assert split_title("General | chat about anything") == ("General", "chat about anything")
    assert split_title("Only title") == ("Only title", "")
    assert split_title(None) == ("", "")


def test_format_time_since():
    assert format_time_since(None) == ""
    assert format_time_since(1000, now=1000) == "just now"
    assert format_time_since(1000, now=1001) == "1 second ago"
    assert format_time_since(1000, now=1000 + 3 * 3600) == "3 hours ago"
    assert format_time_since(1000, now=1000 + 400 * 86400) == "1 year ago"


def test_pager_keyboard():
    assert pager_keyboard("t1", Page(total_pages=1)) is None

    kb = pager_keyboard("t1", Page(total_count=30, total_pages=3, page_number=2))
    row = kb.inline_keyboard[0]
    assert [b.callback_data for b in row] == ["page:t1:1", "page:t1:1", "noop", "page:t1:3", "page:t1:3"]


def test_editpost_enters_edit_state(fake, conn):
    posted = fake.add(compose_post_card("p1", "t1", "old text"))
    state, msg = make_state(), make_msg()

    async def scenario():
        await cmd_editpost(msg, CommandObject(command="editpost", args=f"t1 {posted.id}"),
                           state, conn, PEER)
        return await state.get_state(), await state.get_data()

    current, data = asyncio.run(scenario())
    assert current == EditPostState.waiting_for_text.state
    assert data == {"thread_id": "t1", "message_id": posted.id, "draft": "old text"}


def test_expired_edit_keeps_the_draft(fake, conn):
    fake.edit_window = TWO_DAYS
    posted = fake.add(compose_post_card("p1", "t1", "old text"))
    fake.now += 3 * 24 * 3600
    state, msg = make_state(), make_msg("my careful rewrite")

    async def scenario():
        await state.set_state(EditPostState.waiting_for_text)
        await state.update_data(thread_id="t1", message_id=posted.id, draft="old text")
        await save_edit(msg, state, conn, PEER)
        return await state.get_state(), await state.get_data()

    current, data = asyncio.run(scenario())
    assert current is None
    assert data["draft"] == "my careful rewrite"
    assert "kept" in answered(msg)
    assert fake.messages[posted.id].raw_text == compose_post_card("p1", "t1", "old text")


def test_successful_edit_clears_state(fake, conn):
    posted = fake.add(compose_post_card("p1", "t1", "old text"))
    state, msg = make_state(), make_msg("new text")

    async def scenario():
        await state.set_state(EditPostState.waiting_for_text)
        await state.update_data(thread_id="t1", message_id=posted.id, draft="old text")
        await save_edit(msg, state, conn, PEER)
        return await state.get_state(), await state.get_data()

    current, data = asyncio.run(scenario())
    assert current is None
    assert data == {}
    assert fake.messages[posted.id].raw_text == compose_post_card("p1", "t1", "new text")


def test_ambiguous_post_asks_user_to_check(fake, conn):
    fake.fail_send = AmbiguousSendError("timeout")
    msg = make_msg()

    asyncio.run(cmd_post(msg, CommandObject(command="post", args="t1 hello"), conn, PEER))
    assert fake.send_attempts == 1
    assert "Check the thread" in answered(msg)


def test_posts_with_unparsable_page_shows_first_page(fake, conn):
    for i in range(1, 13):
        fake.add(compose_post_card(f"p{i}", "t1", f"post {i}"))
    msg = make_msg()

    asyncio.run(cmd_posts(msg, CommandObject(command="posts", args="t1 ²"), conn, PEER))
    assert "page 1/2" in answered(msg)
