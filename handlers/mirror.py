# handlers/mirror.py
from aiogram import Router
from aiogram.types import Message

mirror_router = Router()


# Registered last: anything the command routers did not consume lands here.
@mirror_router.message()
async def mirror_message(msg: Message, store, forum_peer):
    if msg.chat.id == forum_peer:
        await store.record(forum_peer, msg)


@mirror_router.edited_message()
async def mirror_edit(msg: Message, store, forum_peer):
    if msg.chat.id == forum_peer:
        await store.record(forum_peer, msg)
