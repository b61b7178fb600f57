import base64
import secrets

ENTITY_ID_BYTES = 16   # boards, threads, posts
SHORT_ID_BYTES = 8     # placeholders et autres ids éphémères


def generate_id(length: int = ENTITY_ID_BYTES) -> str:
    """Random URL-safe id (base64url, no padding). Never contains a newline."""
    raw = secrets.token_bytes(length)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
