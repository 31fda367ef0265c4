"""Escaping of sender-controlled strings for the chat dialects.

Every string copied from a webhook payload (titles, commit messages, logins,
branch names) is attacker-controlled. Plain-text messages must not be able to
inject additional protocol lines, chat commands or formatting markup; HTML
messages must not be able to inject tags.
"""

from __future__ import annotations

import html
import re

ZERO_WIDTH_SPACE = "\u200b"
MAX_MESSAGE_LENGTH = 300
ELLIPSIS = "…"

_LINE_BREAKS = re.compile(r"[\r\n\u2028\u2029\x85\x0b\x0c]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0e-\x1f\x7f]")
# A doubled delimiter toggles chat formatting; ``[[`` creates a link.
_DOUBLED_DELIMITER = re.compile(r"([*_~^\\`\[\]|])(?=\1)")
_COMMAND_PREFIXES = ("/", "!", ">")
_HIGHLIGHT_WORD = re.compile("here")


def single_line(value: str) -> str:
    """Collapse line breaks into spaces and strip control characters.

    Examples
    --------
    >>> single_line("one\\r\\ntwo")
    'one two'

    """
    return _CONTROL_CHARS.sub("", _LINE_BREAKS.sub(" ", value)).strip()


def escape_text(value: str) -> str:
    """Escape ``value`` for embedding in a plain-text chat message.

    Runs of formatting delimiters are split with zero-width spaces so they
    render literally.

    Examples
    --------
    >>> escape_text("**bold**") == "*\\u200b*bold*\\u200b*"
    True

    """
    return _DOUBLED_DELIMITER.sub(r"\1" + ZERO_WIDTH_SPACE, single_line(value))


def guard_command(line: str) -> str:
    """Stop a plain-text line from being read as a command or quote."""
    if line.startswith(_COMMAND_PREFIXES):
        return ZERO_WIDTH_SPACE + line
    return line


def truncate(value: str, limit: int) -> str:
    """Shorten ``value`` to ``limit`` characters, marking the cut."""
    if len(value) <= limit:
        return value
    if limit < 1:
        return ""
    return value[: limit - 1].rstrip() + ELLIPSIS


def escape_html(value: str) -> str:
    """Escape ``value`` for embedding in HTML text or a quoted attribute."""
    return html.escape(single_line(value), quote=True)


def suppress_highlights(markup: str) -> str:
    """Rewrite ``here`` so the server does not treat it as a mass highlight.

    The character reference decodes to the same text in both element content
    and attribute values.
    """
    return _HIGHLIGHT_WORD.sub("her&#101;", markup)


__all__ = [
    "MAX_MESSAGE_LENGTH",
    "ZERO_WIDTH_SPACE",
    "escape_html",
    "escape_text",
    "guard_command",
    "single_line",
    "suppress_highlights",
    "truncate",
]
