"""Report renderers and format lookup."""

from __future__ import annotations

from typing import Dict, Type

from .base import Renderer, format_size, tree_lines
from .html import HtmlRenderer
from .json_renderer import JsonRenderer
from .markdown import MarkdownRenderer
from .text import TextRenderer

_RENDERERS: Dict[str, Type[Renderer]] = {
    "text": TextRenderer,
    "json": JsonRenderer,
    "markdown": MarkdownRenderer,
    "html": HtmlRenderer,
}
_ALIASES: Dict[str, str] = {"txt": "text", "md": "markdown"}

FORMATS = tuple(_RENDERERS)


def get_renderer(fmt: str) -> Renderer:
    """Return a renderer for ``fmt``; raises ValueError for unknown formats."""
    key = fmt.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        renderer_cls = _RENDERERS[key]
    except KeyError:
        choices = ", ".join(sorted((*_RENDERERS, *_ALIASES)))
        raise ValueError(f"Unsupported output format '{fmt}' (choose from {choices})") from None
    return renderer_cls()


__all__ = [
    "FORMATS",
    "HtmlRenderer",
    "JsonRenderer",
    "MarkdownRenderer",
    "Renderer",
    "TextRenderer",
    "format_size",
    "get_renderer",
    "tree_lines",
]
