"""Reversible escaping of post content.

Telegram may reinterpret asterisk, tilde, backtick and underscore as inline
formatting and drop them before the client ever sees the text. Post bodies
are therefore stored with every backslash doubled and each of those
characters replaced by a backslash token::

    *  ->  \\ast
    ~  ->  \\tld
    `  ->  \\btk
    _  ->  \\und

After doubling, a single backslash can only start a token, so decoding is a
single left-to-right scan and ``unescape(escape(s)) == s`` for every ``s``.
"""
import re

TOKENS = {
    "*": "\\ast",
    "~": "\\tld",
    "`": "\\btk",
    "_": "\\und",
}
_REVERSE = {"\\": "\\"}
_REVERSE.update({token[1:]: char for char, token in TOKENS.items()})

_SPECIAL_RE = re.compile("[" + re.escape("".join(TOKENS)) + "]")
_TOKEN_RE = re.compile(r"\\(" + "|".join(re.escape(k) for k in _REVERSE) + ")")


def escape(content: str) -> str:
    if not content:
        return content
    doubled = content.replace("\\", "\\\\")
    return _SPECIAL_RE.sub(lambda m: TOKENS[m.group(0)], doubled)


def unescape(content: str) -> str:
    if not content:
        return content
    # `\\` and tokens are consumed as whole units, left to right
    return _TOKEN_RE.sub(lambda m: _REVERSE[m.group(1)], content)
