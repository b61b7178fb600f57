"""Boundary adapter: every message-like object becomes one ``RawMessage``.

Client libraries disagree on field names (aiogram ``message_id``/``from_user``,
MTProto ``id``/``from_id``, GramJS dumps ``fromId``/``groupedId``, mirrored
rows ``author_id``). All of that is resolved here and nowhere else.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from transport.base import RawMessage

_SERVICE_CLASSES = {"MessageService", "messageService", "MessageEmpty", "messageEmpty"}
_MEDIA_FIELDS = ("media", "photo", "document", "video", "animation", "audio",
                 "voice", "media_file_id")


def _pick(obj: Any, *names: str) -> Any:
    for name in names:
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _user_id(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        return int(raw) if raw.lstrip("-").isdigit() else None
    # User / PeerUser objects, or their dict dumps
    inner = _pick(raw, "user_id", "userId", "id")
    if inner is None or isinstance(inner, (dict, list)):
        return None
    return _user_id(inner)


def _epoch(raw: Any) -> int:
    if raw is None:
        return 0
    if isinstance(raw, datetime):
        return int(raw.timestamp())
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def normalize_message(obj: Any) -> RawMessage | None:
    """Return the canonical record, or None for service/empty/unknown objects."""
    if obj is None:
        return None
    if isinstance(obj, RawMessage):
        return obj

    kind = _pick(obj, "className", "_")
    if kind is None and not isinstance(obj, dict):
        kind = type(obj).__name__
    if kind in _SERVICE_CLASSES:
        return None

    msg_id = _pick(obj, "message_id", "id")
    try:
        msg_id = int(msg_id)
    except (TypeError, ValueError):
        return None

    text = _pick(obj, "raw_text", "message", "text", "caption")
    author = _user_id(_pick(obj, "author_user_id", "author_id", "from_user",
                            "from_id", "fromId", "sender_id"))
    grouped = _pick(obj, "grouped_id", "groupedId", "media_group_id")

    return RawMessage(
        id=msg_id,
        raw_text=text if isinstance(text, str) else "",
        author_user_id=author,
        sent_at=_epoch(_pick(obj, "sent_at", "date")),
        media=_pick(obj, *_MEDIA_FIELDS),
        grouped_id=str(grouped) if grouped is not None else None,
    )


def normalize_messages(objs: Iterable[Any] | None) -> list[RawMessage]:
    out = []
    for obj in objs or ():
        msg = normalize_message(obj)
        if msg is not None:
            out.append(msg)
    return out
