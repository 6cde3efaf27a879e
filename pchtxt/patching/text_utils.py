"""Line utilities for the patch text format.

Small, pure string helpers shared by the metadata scanner and the
patch body parser.
"""

from __future__ import annotations

import re
from typing import List, Tuple

# C locale isspace()
WHITESPACE = " \t\n\v\f\r"

COMMENT_IDENTIFIER = "/"
STRING_QUOTE = '"'
AUTHOR_OPEN = "["
AUTHOR_CLOSE = "]"

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}

_WHITESPACE_RE = re.compile(r"[ \t\n\v\f\r]+")

# strtol(..., base=0): hex with 0x, octal with leading 0, decimal otherwise
_C_INTEGER_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def trim(text: str) -> str:
    return text.strip(WHITESPACE)


def ltrim(text: str) -> str:
    return text.lstrip(WHITESPACE)


def rtrim(text: str) -> str:
    return text.rstrip(WHITESPACE)


def first_token(text: str) -> str:
    """Return the prefix of ``text`` up to the first whitespace character."""
    for index, ch in enumerate(text):
        if ch in WHITESPACE:
            return text[:index]
    return text


def split_tokens(text: str) -> List[str]:
    return [token for token in _WHITESPACE_RE.split(text) if token]


def comment_position(line: str) -> int:
    """Index of the first comment character outside a quoted string."""
    in_string = False
    for index, ch in enumerate(line):
        if ch == COMMENT_IDENTIFIER and not in_string:
            return index
        if ch == STRING_QUOTE:
            in_string = not in_string
    return len(line)


def strip_comment(line: str) -> Tuple[str, str]:
    """Split a line into its code part and its trailing comment body.

    A ``"`` toggles an in-string flag so a ``/`` inside quotes does not
    start a comment. The code part is right-trimmed; the comment body has
    its leading ``/`` characters and whitespace removed.
    """
    pos = comment_position(line)
    code = rtrim(line[:pos])
    comment = line[pos:].lstrip(WHITESPACE + COMMENT_IDENTIFIER)
    return code, comment


def decode_escapes(text: str) -> str:
    """Decode backslash escapes; a trailing lone backslash is kept."""
    result = []
    index = 0
    length = len(text)
    while index < length:
        ch = text[index]
        if ch == "\\" and index + 1 < length:
            index += 1
            escaped = text[index]
            result.append(_ESCAPES.get(escaped, escaped))
        else:
            result.append(ch)
        index += 1
    return "".join(result)


def find_string_close(value: str) -> int:
    """Index of the quote closing the string opened at ``value[0]``, or -1.

    A quote closes the string unless it is preceded by an odd number of
    backslashes.
    """
    pos = 1
    while True:
        pos = value.find(STRING_QUOTE, pos)
        if pos < 0:
            return -1
        backslashes = 0
        back = pos - 1
        while back > 0 and value[back] == "\\":
            backslashes += 1
            back -= 1
        if backslashes % 2 == 0:
            return pos
        pos += 1


def is_hex_string(text: str) -> bool:
    """True if every character is a hex digit. The empty string is hex."""
    return all(ch in HEX_DIGITS for ch in text)


def decode_hex_bytes(token: str, big_endian: bool = False) -> bytes:
    """Decode an even-length hex token into bytes.

    Little-endian keeps the written byte order; big-endian reads the
    byte pairs from the end of the token to its start.
    """
    pairs = [token[i:i + 2] for i in range(0, len(token), 2)]
    if big_endian:
        pairs.reverse()
    return bytes(int(pair, 16) for pair in pairs)


def trim_leading_zeros(text: str) -> str:
    stripped = text.lstrip("0")
    if not stripped and text:
        return text[-1]
    return stripped


def parse_c_integer(text: str) -> int:
    """Parse an integer the way ``strtol(text, NULL, 0)`` reads it.

    Raises:
        ValueError: if ``text`` does not start with a number
    """
    match = _C_INTEGER_RE.match(text)
    if not match:
        raise ValueError(f"not an integer: {text!r}")
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif len(digits) > 1 and digits[0] == "0":
        value = int(digits[1:], 8)
    else:
        value = int(digits, 10)
    return -value if sign == "-" else value


def split_name_author(comment: str) -> Tuple[str, str]:
    """Split ``"Patch name [author]"`` into ``("Patch name", "author")``.

    The author is taken from the last ``[`` ... ``]`` pair. Without brackets
    the whole comment is the name and the author is empty.
    """
    open_pos = comment.rfind(AUTHOR_OPEN)
    if open_pos < 0:
        return rtrim(comment), ""
    close_pos = comment.rfind(AUTHOR_CLOSE)
    name = rtrim(comment[:open_pos])
    if close_pos > open_pos:
        author = comment[open_pos + 1:close_pos]
    else:
        author = comment[open_pos + 1:]
    return name, trim(author)
