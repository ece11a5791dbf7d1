"""Parsing of double-quoted string literals with JSON-like escapes.

A string literal is enclosed in double quotes and may contain any character
except an unescaped backslash or quote.  The escapes ``\\b \\f \\n \\r \\t
\\" \\\\ \\/`` are recognised, as are code points written ``\\u{XXXX}`` with
one to six hexadecimal digits.  A backslash followed by whitespace drops all
whitespace up to the next other character.
"""

from __future__ import annotations

import re

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "\\": "\\",
    "/": "/",
    '"': '"',
}
_WHITESPACE = frozenset(" \t\r\n")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_MAX_HEX_DIGITS = 6
_LITERAL = re.compile(r'[^"\\]+')


class StringParseError(ValueError):
    """The text does not start with a valid string literal.

    ``incomplete`` is set when the input ended before the literal did.
    """

    def __init__(self, message: str, position: int, incomplete: bool = False) -> None:
        super().__init__(f"{message} at offset {position}")
        self.position = position
        self.incomplete = incomplete


def _incomplete(position: int) -> StringParseError:
    return StringParseError("unexpected end of input", position, incomplete=True)


def _unicode_escape(text: str, pos: int) -> tuple[str, int]:
    """Parse ``{XXXX}`` starting at ``pos``, just after the ``u``."""
    end = len(text)
    if pos >= end:
        raise _incomplete(pos)
    if text[pos] != "{":
        raise StringParseError("expected '{' in unicode escape", pos)
    start = pos + 1
    digits_end = start
    while (
        digits_end < end
        and digits_end - start < _MAX_HEX_DIGITS
        and text[digits_end] in _HEX_DIGITS
    ):
        digits_end += 1
    count = digits_end - start
    if count < _MAX_HEX_DIGITS and digits_end == end:
        raise _incomplete(digits_end)
    if count == 0:
        raise StringParseError("expected hexadecimal digits", digits_end)
    if digits_end >= end:
        raise _incomplete(digits_end)
    if text[digits_end] != "}":
        raise StringParseError("expected '}' in unicode escape", digits_end)
    code = int(text[start:digits_end], 16)
    if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
        raise StringParseError(f"invalid code point {code:#x}", start)
    return chr(code), digits_end + 1


def _escape(text: str, pos: int) -> tuple[str, int]:
    """Parse what follows a backslash at ``pos``; escaped whitespace yields ''."""
    end = len(text)
    if pos >= end:
        raise _incomplete(pos)
    marker = text[pos]
    if marker == "u":
        return _unicode_escape(text, pos + 1)
    if marker in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[marker], pos + 1
    if marker in _WHITESPACE:
        stop = pos
        while stop < end and text[stop] in _WHITESPACE:
            stop += 1
        if stop == end:
            raise _incomplete(stop)
        return "", stop
    raise StringParseError(f"invalid escape '\\{marker}'", pos - 1)


def parse_string(text: str) -> tuple[str, str]:
    """Parse a string literal at the start of ``text``.

    Returns the text after the closing quote and the decoded string.
    """
    if not text:
        raise _incomplete(0)
    if text[0] != '"':
        raise StringParseError("expected '\"'", 0)
    parts: list[str] = []
    pos = 1
    end = len(text)
    while True:
        if pos >= end:
            raise _incomplete(pos)
        ch = text[pos]
        if ch == '"':
            return text[pos + 1 :], "".join(parts)
        if ch == "\\":
            piece, pos = _escape(text, pos + 1)
            parts.append(piece)
            continue
        match = _LITERAL.match(text, pos)
        assert match is not None
        if match.end() == end:
            raise _incomplete(end)
        parts.append(match.group())
        pos = match.end()