from datetime import datetime, timezone
from types import SimpleNamespace

from aiogram.types import Chat, Message, PhotoSize, User

from transport.adapter import normalize_message, normalize_messages
from transport.base import RawMessage

WHEN = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_aiogram_message():
    msg = Message(
        message_id=5,
        date=WHEN,
        chat=Chat(id=-100, type="supergroup"),
        from_user=User(id=7, is_bot=False, first_name="Ann"),
        caption="fg.post\np1",
        photo=[PhotoSize(file_id="small", file_unique_id="s", width=1, height=1)],
        media_group_id="album-1",
    )
    raw = normalize_message(msg)
    assert raw.id == 5
    assert raw.raw_text == "fg.post\np1"
    assert raw.author_user_id == 7
    assert raw.sent_at == int(WHEN.timestamp())
    assert raw.grouped_id == "album-1"
    assert raw.media[0].file_id == "small"


def test_gramjs_dump():
    raw = normalize_message({
        "className": "Message",
        "id": 9,
        "message": "hello",
        "fromId": {"className": "PeerUser", "userId": "77"},
        "date": 1700000000,
        "groupedId": 123,
    })
    assert (raw.id, raw.raw_text, raw.author_user_id) == (9, "hello", 77)
    assert raw.sent_at == 1700000000
    assert raw.grouped_id == "123"


def test_mtproto_style_object():
    obj = SimpleNamespace(id=4, message="x", from_id=SimpleNamespace(user_id=8),
                          date=WHEN, grouped_id=55)
    raw = normalize_message(obj)
    assert raw.author_user_id == 8
    assert raw.grouped_id == "55"


def test_service_and_invalid_messages_are_dropped():
    assert normalize_message(None) is None
    assert normalize_message({"className": "MessageService", "id": 3}) is None
    assert normalize_message({"_": "messageEmpty", "id": 3}) is None
    assert normalize_message({"id": "abc", "message": "x"}) is None


def test_missing_text_becomes_empty():
    raw = normalize_message({"id": 1, "media": {"photo": 1}})
    assert raw.raw_text == ""
    assert raw.media == {"photo": 1}
    assert raw.author_user_id is None
    assert raw.sent_at == 0


def test_raw_message_passes_through():
    raw = RawMessage(id=1, raw_text="x")
    assert normalize_message(raw) is raw


def test_normalize_messages_skips_unusable():
    out = normalize_messages([{"id": 1, "text": "a"}, {"className": "MessageService", "id": 2}, None])
    assert [m.id for m in out] == [1]
    assert normalize_messages(None) == []
