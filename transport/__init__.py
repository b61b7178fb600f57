from transport.base import RawMessage, SearchResult, Transport
from transport.adapter import normalize_message, normalize_messages
from transport.connection import ConnectionManager

__all__ = [
    "RawMessage", "SearchResult", "Transport",
    "normalize_message", "normalize_messages",
    "ConnectionManager",
]
