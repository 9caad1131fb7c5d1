"""Shared renderer plumbing: the renderer interface and formatting helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from ..models import Entry, EntryKind
from ..report import ReportModel

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
_TEMPLATES_DIR = Path(__file__).with_name("templates")

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def format_size(size: int) -> str:
    """Human readable byte count: whole bytes, one decimal above that."""
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{size} B"
    return f"{value:.1f} {_SIZE_UNITS[unit]}"


def _label(entry: Entry) -> str:
    if entry.is_dir:
        return f"{entry.name}/"
    if entry.kind is EntryKind.SYMLINK:
        return f"{entry.name} -> {entry.link_target or '?'}"
    return entry.name


def tree_lines(tree: Entry) -> List[str]:
    """Draw ``tree`` with box-drawing connectors, one line per entry."""
    lines = [_label(tree)]

    def walk(entry: Entry, prefix: str) -> None:
        last_index = len(entry.children) - 1
        for index, child in enumerate(entry.children):
            is_last = index == last_index
            lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{_label(child)}")
            if child.is_dir:
                walk(child, prefix + (SPACE if is_last else PIPE))

    walk(tree, "")
    return lines


def file_summary(payload: Dict[str, object]) -> str:
    """One-line size and line statistics for a file payload from ``ReportModel.files``."""
    lines = payload["lines"]
    return (
        f"{format_size(payload['logical_bytes'])} content, "
        f"{format_size(payload['allocated_bytes'])} on disk, "
        f"{lines['total']} lines ({lines['code']} code, "
        f"{lines['comment']} comment, {lines['blank']} blank)"
    )


def fence_for(content: str) -> str:
    """Backtick fence longer than any backtick run inside ``content``."""
    longest = run = 0
    for char in content:
        run = run + 1 if char == "`" else 0
        longest = max(longest, run)
    return "`" * max(3, longest + 1)


def create_environment(*, autoescape: bool) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=autoescape,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["format_size"] = format_size
    env.filters["fence"] = fence_for
    env.filters["file_summary"] = file_summary
    return env


def template_context(model: ReportModel) -> Dict[str, object]:
    """Values shared by the template-driven renderers."""
    return {
        "model": model,
        "root_name": model.root.name or str(model.root),
        "generated_at": (
            model.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC") if model.generated_at else None
        ),
        "project_types": model.project_types,
        "frameworks": model.frameworks,
        "tree": "\n".join(tree_lines(model.tree)),
        "stats": model.statistics,
        "exclusions": model.statistics.exclusions,
        "files": model.files(),
        "errors": model.errors,
    }


class Renderer(ABC):
    """Turns a :class:`ReportModel` into one output document."""

    name: str = ""
    extension: str = ""

    @abstractmethod
    def render(self, model: ReportModel) -> str:
        """Return the complete document for ``model``."""

    def output_path(self, root: Path, output_name: str) -> Path:
        return root / f"{output_name}.{self.extension}"


__all__ = [
    "Renderer",
    "create_environment",
    "fence_for",
    "file_summary",
    "format_size",
    "template_context",
    "tree_lines",
]
