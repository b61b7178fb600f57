# bot.py
from __future__ import annotations

import asyncio, logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums.parse_mode import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand, BotCommandScopeDefault
from aiohttp import web

from config import TOKEN, FORUM_CHAT, LOG_LEVEL, API_HOST, API_PORT
from database.database import init_db
from database.utils import MessageStore
from transport.bot_api import BotApiTransport
from transport.connection import ConnectionManager
from api import create_app

from handlers import boards_router, threads_router, posts_router, mirror_router

# ───────────────────────────  Bot / Dispatcher
logging.basicConfig(level=LOG_LEVEL)

bot = Bot(TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
dp  = Dispatcher(storage=MemoryStorage())
for r in (boards_router, threads_router, posts_router, mirror_router):
    dp.include_router(r)

store = MessageStore()


async def connect_transport() -> BotApiTransport:
    await init_db()
    return BotApiTransport(bot, store)

forum_conn = ConnectionManager(connect_transport)

# handlers reçoivent forum_conn / forum_peer / store par injection
dp["forum_conn"] = forum_conn
dp["forum_peer"] = FORUM_CHAT
dp["store"] = store

# ───────────────────────────  /commands
DEFAULT_COMMANDS = [
    BotCommand(command="boards",    description="📋 Boards"),
    BotCommand(command="newboard",  description="➕ New board"),
    BotCommand(command="threads",   description="🧵 Threads of a board"),
    BotCommand(command="newthread", description="➕ New thread"),
    BotCommand(command="posts",     description="📄 Posts of a thread"),
    BotCommand(command="post",      description="✍️ Reply in a thread"),
    BotCommand(command="editpost",  description="✏️ Edit a post"),
    BotCommand(command="cancel",    description="❌ Cancel"),
]
async def set_bot_commands(b: Bot):
    await b.set_my_commands(DEFAULT_COMMANDS, BotCommandScopeDefault())


# ───────────────────────────  aiohttp (API lecture)
async def start_api():
    runner = web.AppRunner(create_app(forum_conn, FORUM_CHAT))
    await runner.setup()
    site = web.TCPSite(runner, API_HOST, API_PORT)
    await site.start()
    logging.info("Read API on %s:%s", API_HOST, API_PORT)


# ───────────────────────────  Main
async def main():
    if not FORUM_CHAT:
        raise SystemExit("forum_chat is not set in config.yml")
    await forum_conn.get()
    asyncio.create_task(start_api())
    await set_bot_commands(bot)
    await dp.start_polling(bot)

if __name__ == "__main__":
    asyncio.run(main())
