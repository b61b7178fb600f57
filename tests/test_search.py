import asyncio

from protocol.cards import compose_board_card, compose_thread_card
from protocol.forum import create_board
from protocol.search import (
    Phase, Reconciliation, board_query, search_boards, search_threads,
)
from tests.fakes import PEER


def test_finds_boards_and_ignores_chatter(fake, conn):
    fake.add(compose_board_card("b1", "One"))
    fake.add("fg.metadata.board mentioned in a normal message")
    fake.add(compose_board_card("b2", "Two"))

    boards = asyncio.run(search_boards(conn, PEER))
    assert sorted(b.id for b in boards) == ["b1", "b2"]


def test_parent_must_match_exactly(fake, conn):
    fake.add(compose_thread_card("t1", "abc", "mine"))
    fake.add(compose_thread_card("t2", "xabcx", "not mine"))

    threads = asyncio.run(search_threads(conn, PEER, "abc"))
    assert [t.id for t in threads] == ["t1"]


def test_fresh_card_found_despite_index_lag(fake, conn):
    fake.index_lag = 1
    fake.add(compose_board_card("old", "Old"))

    async def scenario():
        board = await create_board(conn, PEER, "Fresh")
        return board, await search_boards(conn, PEER)

    board, boards = asyncio.run(scenario())
    assert {b.id for b in boards} == {"old", board.id}


def test_index_and_scan_hits_are_deduplicated(fake, conn):
    fake.add(compose_board_card("b1", "One"))
    fake.add(compose_board_card("b2", "Two"))

    boards = asyncio.run(search_boards(conn, PEER))
    assert len(boards) == 2
    assert fake.history_calls == 1


def test_index_alone_can_satisfy_limit(fake, conn):
    fake.add(compose_board_card("b1", "One"))
    fake.add(compose_board_card("b2", "Two"))

    boards = asyncio.run(search_boards(conn, PEER, limit=1))
    assert len(boards) == 1
    assert fake.history_calls == 0


def test_search_failure_falls_back_to_history(fake, conn):
    fake.fail_search = True
    fake.add(compose_board_card("b1", "One"))

    boards = asyncio.run(search_boards(conn, PEER))
    assert [b.id for b in boards] == ["b1"]


def test_history_failure_keeps_indexed_results(fake, conn):
    fake.index_lag = 1
    fake.fail_history = True
    fake.add(compose_board_card("b1", "One"))
    fake.add(compose_board_card("b2", "Two"))    # not indexed yet

    boards = asyncio.run(search_boards(conn, PEER))
    assert [b.id for b in boards] == ["b1"]


def test_scan_stops_at_page_ceiling(fake):
    fake.index_lag = 10_000
    fake.add(compose_board_card("deep", "Deep"))
    for i in range(30):
        fake.add(f"chatter {i}")

    rec = Reconciliation(fake, PEER, board_query(), 10, scan_page_size=5, max_scan_pages=2)
    assert asyncio.run(rec.run()) == []
    assert rec.pages_scanned == 2
    assert rec.phase is Phase.DONE

    rec = Reconciliation(fake, PEER, board_query(), 10, scan_page_size=5, max_scan_pages=10)
    assert [b.id for b in asyncio.run(rec.run())] == ["deep"]
    assert rec.indexed_count == 0


def test_short_page_ends_scan(fake):
    fake.add(compose_board_card("b1", "One"))
    fake.add("chatter")

    rec = Reconciliation(fake, PEER, board_query(), 10, scan_page_size=100)
    asyncio.run(rec.run())
    assert rec.pages_scanned == 1
    assert rec.indexed_count == 1


def test_zero_scan_pages_skips_history(fake):
    fake.index_lag = 1
    fake.add(compose_board_card("b1", "One"))

    rec = Reconciliation(fake, PEER, board_query(), 10, max_scan_pages=0)
    assert asyncio.run(rec.run()) == []
    assert fake.history_calls == 0


def test_fresh_thread_listed_despite_index_lag(fake, conn):
    fake.index_lag = 1

    async def scenario():
        sent = await fake.send_plain_message(PEER, compose_thread_card("abc", "board1", "Hello"))
        return sent, await search_threads(conn, PEER, "board1")

    sent, threads = asyncio.run(scenario())
    assert [(t.id, t.parent_board_id, t.message_id) for t in threads] == [("abc", "board1", sent.id)]
    assert fake.search_calls == 1
    assert fake.history_calls == 1
