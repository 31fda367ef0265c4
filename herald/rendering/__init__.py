"""Chat message rendering for normalized events."""

from __future__ import annotations

from .escape import MAX_MESSAGE_LENGTH, escape_html, escape_text
from .renderer import MessageRenderer, RoutedMessage
from .templates import render_html, render_text

__all__ = [
    "MAX_MESSAGE_LENGTH",
    "MessageRenderer",
    "RoutedMessage",
    "escape_html",
    "escape_text",
    "render_html",
    "render_text",
]
