"""Unit tests for chat dialect escaping."""

from __future__ import annotations

import pytest

from herald.rendering.escape import (
    ELLIPSIS,
    ZERO_WIDTH_SPACE,
    escape_html,
    escape_text,
    guard_command,
    single_line,
    suppress_highlights,
    truncate,
)

ZWSP = ZERO_WIDTH_SPACE


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("one\ntwo", "one two"),
        ("one\r\n\r\ntwo", "one two"),
        ("one two", "one two"),
        ("bell\x07less", "bellless"),
        ("  padded  ", "padded"),
    ],
)
def test_single_line_collapses_breaks(raw: str, expected: str) -> None:
    """Line breaks become spaces and control characters disappear."""
    assert single_line(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("**bold**", f"*{ZWSP}*bold*{ZWSP}*"),
        ("__italic__", f"_{ZWSP}_italic_{ZWSP}_"),
        ("~~strike~~", f"~{ZWSP}~strike~{ZWSP}~"),
        ("``code``", f"`{ZWSP}`code`{ZWSP}`"),
        ("[[link]]", f"[{ZWSP}[link]{ZWSP}]"),
        ("***", f"*{ZWSP}*{ZWSP}*"),
        ("a * b _ c", "a * b _ c"),
    ],
)
def test_escape_text_breaks_formatting_runs(raw: str, expected: str) -> None:
    """Doubled delimiters are split so they render literally."""
    assert escape_text(raw) == expected


def test_escape_text_cannot_inject_protocol_lines() -> None:
    """Newlines in titles cannot start a second protocol line."""
    escaped = escape_text("title\n|/kick someone")
    assert "\n" not in escaped


@pytest.mark.parametrize("line", ["/kick x", "!dt pikachu", ">>> 1 + 1"])
def test_guard_command_neutralises_commands(line: str) -> None:
    """Lines starting with a command prefix are shielded."""
    assert guard_command(line) == ZWSP + line


def test_guard_command_keeps_ordinary_lines() -> None:
    """Ordinary text is untouched."""
    assert guard_command("octocat pushed") == "octocat pushed"


@pytest.mark.parametrize(
    ("value", "limit", "expected"),
    [
        ("short", 10, "short"),
        ("exactly10!", 10, "exactly10!"),
        ("this is too long", 8, f"this is{ELLIPSIS}"),
        ("anything", 0, ""),
    ],
)
def test_truncate(value: str, limit: int, expected: str) -> None:
    """Values longer than the limit are cut and marked."""
    result = truncate(value, limit)
    assert result == expected
    assert len(result) <= max(limit, 0)


def test_escape_html_escapes_markup_and_quotes() -> None:
    """Tags and both quote characters are escaped."""
    assert escape_html("<b>\"x\" & 'y'</b>") == (
        "&lt;b&gt;&quot;x&quot; &amp; &#x27;y&#x27;&lt;/b&gt;"
    )


def test_suppress_highlights_rewrites_here() -> None:
    """The mass-highlight keyword is replaced by a character reference."""
    assert suppress_highlights("everyone here, there") == (
        "everyone her&#101;, ther&#101;"
    )
