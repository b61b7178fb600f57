# api.py : lecture seule, JSON, servi à côté du polling
from __future__ import annotations

from aiohttp import web

from config import POSTS_PAGE_SIZE
from handlers.common import MISSING_BOARD
from protocol.activity import last_post_for_board, last_posts_for_threads
from protocol.cards import BoardMeta, ThreadMeta, PostCard
from protocol.forum import find_board, list_threads
from protocol.pagination import fetch_page
from protocol.search import search_boards
from transport.connection import ConnectionManager

CONN_KEY = web.AppKey("forum_conn", ConnectionManager)
PEER_KEY = web.AppKey("forum_peer", int)


def board_json(b: BoardMeta) -> dict:
    return {"id": b.id, "message_id": b.message_id, "title": b.title,
            "description": b.description, "creator_user_id": b.creator_user_id, "date": b.date}


def thread_json(t: ThreadMeta) -> dict:
    return {"id": t.id, "parent_board_id": t.parent_board_id, "message_id": t.message_id,
            "title": t.title, "creator_user_id": t.creator_user_id, "date": t.date}


def post_json(p: PostCard | None) -> dict | None:
    if p is None:
        return None
    return {"id": p.id, "parent_thread_id": p.parent_thread_id, "message_id": p.message_id,
            "content": p.content, "from_user_id": p.from_user_id, "date": p.date,
            "grouped_id": p.grouped_id, "has_media": p.media is not None}


# ─────────────────────────── handlers
async def handle_boards(request: web.Request):
    app = request.app
    boards = await search_boards(app[CONN_KEY], app[PEER_KEY])
    boards.sort(key=lambda b: b.date, reverse=True)
    return web.json_response({"boards": [board_json(b) for b in boards]})


async def handle_board(request: web.Request):
    app = request.app
    conn, peer = app[CONN_KEY], app[PEER_KEY]
    board_id = request.match_info["board_id"]

    board = await find_board(conn, peer, board_id)
    threads = await list_threads(conn, peer, board_id)
    last = await last_posts_for_threads(conn, peer, [t.id for t in threads])
    return web.json_response({
        # zombie threads still render, under a placeholder board
        "board": board_json(board) if board else {"id": board_id, "title": MISSING_BOARD, "missing": True},
        "threads": [dict(thread_json(t), last_post=post_json(last.get(t.id))) for t in threads],
    })


async def handle_board_activity(request: web.Request):
    app = request.app
    last = await last_post_for_board(app[CONN_KEY], app[PEER_KEY], request.match_info["board_id"])
    return web.json_response({"last_post": post_json(last)})


async def handle_posts(request: web.Request):
    app = request.app
    thread_id = request.match_info["thread_id"]
    raw = request.query.get("page", "1")
    try:
        requested = int(raw)
    except ValueError:
        requested = 1

    page = await fetch_page(app[CONN_KEY], app[PEER_KEY], thread_id, requested, POSTS_PAGE_SIZE)
    if raw != str(page.page_number):
        raise web.HTTPFound(f"/threads/{thread_id}/posts?page={page.page_number}")

    return web.json_response({
        "items": [post_json(p) for p in page.items],
        "total_count": page.total_count,
        "total_pages": page.total_pages,
        "page": page.page_number,
        "first": page.first_page,
        "prev": page.prev_page if page.has_prev else None,
        "next": page.next_page if page.has_next else None,
        "last": page.last_page,
    })


def create_app(conn: ConnectionManager, peer: int) -> web.Application:
    app = web.Application()
    app[CONN_KEY] = conn
    app[PEER_KEY] = peer
    app.router.add_get("/boards", handle_boards)
    app.router.add_get("/boards/{board_id}", handle_board)
    app.router.add_get("/boards/{board_id}/activity", handle_board_activity)
    app.router.add_get("/threads/{thread_id}/posts", handle_posts)
    return app
