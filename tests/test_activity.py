import asyncio

from protocol.activity import (
    last_post_for_board, last_post_for_thread, last_posts_for_threads, newest,
)
from protocol.cards import PostCard, compose_post_card, compose_thread_card
from tests.fakes import PEER


def post(pid, date):
    return PostCard(id=pid, parent_thread_id="t", message_id=date, content="", date=date)


def test_newest_ignores_missing_and_keeps_first_on_ties():
    assert newest([]) is None
    assert newest([None, None]) is None
    a, b = post("a", 5), post("b", 5)
    assert newest([None, a, b, post("c", 1)]) is a


def test_last_post_for_thread(fake, conn):
    fake.add(compose_post_card("p1", "t1", "first"))
    fake.add(compose_post_card("p2", "t1", "second"))
    fake.add(compose_post_card("p3", "t2", "other thread"))

    last = asyncio.run(last_post_for_thread(conn, PEER, "t1"))
    assert last.content == "second"


def test_last_posts_for_threads_keyed_by_thread(fake, conn):
    fake.add(compose_post_card("p1", "t1", "one"))
    fake.add(compose_post_card("p2", "t2", "two"))

    result = asyncio.run(last_posts_for_threads(conn, PEER, ["t1", "t2", "t1", "empty"]))
    assert list(result) == ["t1", "t2", "empty"]
    assert result["t1"].content == "one"
    assert result["t2"].content == "two"
    assert result["empty"] is None


def test_last_post_for_board_limited_to_newest_threads(fake, conn):
    fake.add(compose_thread_card("old", "b1", "Old thread"))
    fake.add(compose_thread_card("new", "b1", "New thread"))
    fake.add(compose_post_card("p1", "new", "in new thread"))
    fake.add(compose_post_card("p2", "old", "latest, in old thread"))

    assert asyncio.run(last_post_for_board(conn, PEER, "b1")).content == "latest, in old thread"
    # only the newest thread is looked at: stale but bounded
    assert asyncio.run(last_post_for_board(conn, PEER, "b1", max_threads=1)).content == "in new thread"


def test_last_post_for_empty_board(fake, conn):
    assert asyncio.run(last_post_for_board(conn, PEER, "nothing")) is None
