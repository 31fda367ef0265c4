"""Pokémon Showdown chat protocol framing.

Server frames are one or more newline-separated lines. A frame addressed to
a room starts with a ``>roomid`` line; each following line is either
``|kind|arg|arg...`` or raw text. Client frames are ``roomid|text``, with an
empty room id for global commands.

Examples
--------
>>> parse_frame(">lobby\\n|init|chat")
[ServerMessage(room='lobby', kind='init', args=('chat',))]
>>> format_chat("dev", "hello")
'dev|hello'

"""

from __future__ import annotations

import dataclasses as dc
import re

_NON_ID_CHARS = re.compile(r"[^a-z0-9]")
# Rank symbols precede the name; ``@`` introduces the away status suffix.
_RANK_SYMBOLS = " +%@*#&~^☆§!"


@dc.dataclass(frozen=True, slots=True)
class ServerMessage:
    """One parsed line of a server frame.

    Attributes
    ----------
    room
        Room the line belongs to, or ``""`` for global lines.
    kind
        Message kind such as ``challstr`` or ``updateuser``; ``""`` for raw
        text lines.
    args
        Remaining pipe-separated fields.

    """

    room: str
    kind: str
    args: tuple[str, ...] = ()


def parse_frame(frame: str) -> list[ServerMessage]:
    """Split a server frame into its lines."""
    lines = frame.split("\n")
    room = ""
    if lines and lines[0].startswith(">"):
        room = lines[0][1:].strip()
        lines = lines[1:]

    messages: list[ServerMessage] = []
    for line in lines:
        if not line:
            continue
        if not line.startswith("|"):
            messages.append(ServerMessage(room=room, kind="", args=(line,)))
            continue
        kind, *args = line[1:].split("|")
        messages.append(ServerMessage(room=room, kind=kind, args=tuple(args)))
    return messages


def to_user_id(name: str) -> str:
    """Return the canonical user id for a display name.

    >>> to_user_id(" Herald Bot@!")
    'heraldbot'
    """
    return _NON_ID_CHARS.sub("", strip_rank(name).lower())


def strip_rank(name: str) -> str:
    """Remove the leading rank symbol and trailing status from a user name."""
    if name and name[0] in _RANK_SYMBOLS:
        name = name[1:]
    return name.split("@", 1)[0]


def challenge_of(message: ServerMessage) -> str:
    """Return the challenge string of a ``challstr`` line.

    The challenge itself contains ``|``, so the arguments are rejoined.
    """
    return "|".join(message.args)


def format_chat(room: str, text: str) -> str:
    """Frame ``text`` for delivery to ``room``."""
    return f"{room}|{text}"


def format_command(command: str, room: str = "") -> str:
    """Frame a slash command, optionally scoped to ``room``."""
    return f"{room}|/{command}"


def trn_command(username: str, assertion: str) -> str:
    """Frame the command that claims ``username`` with a login assertion."""
    return format_command(f"trn {username},0,{assertion}")


def away_command() -> str:
    """Frame the global command that marks the account as away."""
    return format_command("away")


def join_command(room: str) -> str:
    """Frame the command that joins ``room``."""
    return format_command(f"join {room}")


__all__ = [
    "ServerMessage",
    "away_command",
    "challenge_of",
    "format_chat",
    "format_command",
    "join_command",
    "parse_frame",
    "strip_rank",
    "to_user_id",
    "trn_command",
]
