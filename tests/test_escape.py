import json

import pytest

from protocol.cards import compose_post_card
from protocol.escape import escape, unescape


def test_special_characters_become_tokens():
    assert escape("*bold*") == "\\astbold\\ast"
    assert escape("~strike~") == "\\tldstrike\\tld"
    assert escape("`code`") == "\\btkcode\\btk"
    assert escape("snake_case") == "snake\\undcase"


def test_backslashes_are_doubled_first():
    assert escape("a\\b") == "a\\\\b"
    assert escape("\\*") == "\\\\\\ast"


def test_escaped_text_has_no_special_characters():
    out = escape("*~`_ mixed *~`_")
    for ch in "*~`_":
        assert ch not in out


def test_empty_and_plain_content_unchanged():
    assert escape("") == ""
    assert unescape("") == ""
    assert escape("hello world") == "hello world"


@pytest.mark.parametrize("content", [
    "```python\nprint('hi')\n```",
    "\\ast",                      # literal token text
    "\\\\ast and \\btk",
    "trailing backslash \\",
    "_*~`\\",
    "unicode ✓ café *ok*",
])
def test_unescape_inverts_escape(content):
    assert unescape(escape(content)) == content


def test_code_fence_on_the_wire():
    text = compose_post_card("p1", "t1", "```python\nprint(1)\n```")
    payload = json.loads("\n".join(text.split("\n")[3:]))
    assert payload["content"].startswith("\\btk\\btk\\btkpython\n")
