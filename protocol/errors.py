class ForumError(Exception):
    """Base for every failure surfaced by the forum protocol."""


class TransportError(ForumError):
    """The chat transport rejected or failed a request."""


class EditWindowExpired(TransportError):
    """The transport no longer accepts edits for this message."""


class AmbiguousSendError(TransportError):
    """A send failed after the transport may already have committed it.

    Never retry automatically: a retry can publish the same card twice.
    """
