from protocol.errors import ForumError, TransportError, EditWindowExpired, AmbiguousSendError
from protocol.ids import generate_id, ENTITY_ID_BYTES, SHORT_ID_BYTES
from protocol.escape import escape, unescape
from protocol.cards import (
    BoardMeta, ThreadMeta, PostCard, ParsedCard,
    compose_board_card, parse_board_card,
    compose_thread_card, parse_thread_card,
    compose_post_card, parse_post_card,
)
from protocol.search import search_boards, search_threads, search_posts, Reconciliation, Phase
from protocol.activity import last_post_for_thread, last_posts_for_threads, last_post_for_board
from protocol.pagination import Page, fetch_page

__all__ = [
    "ForumError", "TransportError", "EditWindowExpired", "AmbiguousSendError",
    "generate_id", "ENTITY_ID_BYTES", "SHORT_ID_BYTES",
    "escape", "unescape",
    "BoardMeta", "ThreadMeta", "PostCard", "ParsedCard",
    "compose_board_card", "parse_board_card",
    "compose_thread_card", "parse_thread_card",
    "compose_post_card", "parse_post_card",
    "search_boards", "search_threads", "search_posts", "Reconciliation", "Phase",
    "last_post_for_thread", "last_posts_for_threads", "last_post_for_board",
    "Page", "fetch_page",
]
