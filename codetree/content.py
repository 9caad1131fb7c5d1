"""Line-oriented code/comment/blank classification.

Comment detection is a heuristic over the start of each trimmed line, not a
tokenizer: a line holding code followed by a trailing comment counts as code.
The only state carried between lines is the closing token of an open block
comment, which is threaded explicitly through :func:`classify_line`.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Optional, Tuple

from .models import LineCounts

CODE = "code"
COMMENT = "comment"
BLANK = "blank"

# Pending block-comment terminator, or None when outside a block comment.
BlockState = Optional[str]


@dataclass(frozen=True)
class CommentSyntax:
    """Comment tokens for one language."""

    line_prefixes: Tuple[str, ...] = ()
    block_pairs: Tuple[Tuple[str, str], ...] = ()


_C_STYLE = CommentSyntax(line_prefixes=("//",), block_pairs=(("/*", "*/"),))
_HASH = CommentSyntax(line_prefixes=("#",))
_MARKUP = CommentSyntax(block_pairs=(("<!--", "-->"),))
_SQL = CommentSyntax(line_prefixes=("--",), block_pairs=(("/*", "*/"),))

COMMENT_SYNTAX: Dict[str, CommentSyntax] = {
    "Rust": _C_STYLE,
    "C": _C_STYLE,
    "C++": _C_STYLE,
    "C#": _C_STYLE,
    "Java": _C_STYLE,
    "Kotlin": _C_STYLE,
    "Scala": _C_STYLE,
    "Go": _C_STYLE,
    "Swift": _C_STYLE,
    "Dart": _C_STYLE,
    "JavaScript": _C_STYLE,
    "TypeScript": _C_STYLE,
    "Objective-C": _C_STYLE,
    "SCSS": _C_STYLE,
    "Less": _C_STYLE,
    "CSS": CommentSyntax(block_pairs=(("/*", "*/"),)),
    "PHP": CommentSyntax(line_prefixes=("//", "#"), block_pairs=(("/*", "*/"),)),
    "Python": _HASH,
    "Ruby": CommentSyntax(line_prefixes=("#",), block_pairs=(("=begin", "=end"),)),
    "Shell": _HASH,
    "PowerShell": CommentSyntax(line_prefixes=("#",), block_pairs=(("<#", "#>"),)),
    "Perl": _HASH,
    "R": _HASH,
    "Julia": CommentSyntax(line_prefixes=("#",), block_pairs=(("#=", "=#"),)),
    "YAML": _HASH,
    "TOML": _HASH,
    "Dockerfile": _HASH,
    "Makefile": _HASH,
    "Dotenv": _HASH,
    "INI": CommentSyntax(line_prefixes=(";", "#")),
    "HTML": _MARKUP,
    "XML": _MARKUP,
    "SVG": _MARKUP,
    "Markdown": _MARKUP,
    "Vue": CommentSyntax(line_prefixes=("//",), block_pairs=(("<!--", "-->"), ("/*", "*/"))),
    "Svelte": CommentSyntax(line_prefixes=("//",), block_pairs=(("<!--", "-->"), ("/*", "*/"))),
    "SQL": _SQL,
    "Lua": CommentSyntax(line_prefixes=("--",), block_pairs=(("--[[", "]]"),)),
    "Haskell": CommentSyntax(line_prefixes=("--",), block_pairs=(("{-", "-}"),)),
    "Batch": CommentSyntax(line_prefixes=("REM ", "rem ", "::")),
    "Elixir": _HASH,
}

_LANGUAGE_BY_SUFFIX: Dict[str, str] = {
    ".rs": "Rust",
    ".c": "C",
    ".h": "C",
    ".cpp": "C++",
    ".cc": "C++",
    ".cxx": "C++",
    ".hpp": "C++",
    ".hh": "C++",
    ".cs": "C#",
    ".java": "Java",
    ".kt": "Kotlin",
    ".kts": "Kotlin",
    ".scala": "Scala",
    ".go": "Go",
    ".swift": "Swift",
    ".dart": "Dart",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".m": "Objective-C",
    ".mm": "Objective-C",
    ".css": "CSS",
    ".scss": "SCSS",
    ".sass": "SCSS",
    ".less": "Less",
    ".php": "PHP",
    ".py": "Python",
    ".pyi": "Python",
    ".rb": "Ruby",
    ".sh": "Shell",
    ".bash": "Shell",
    ".zsh": "Shell",
    ".ps1": "PowerShell",
    ".pl": "Perl",
    ".pm": "Perl",
    ".r": "R",
    ".jl": "Julia",
    ".yml": "YAML",
    ".yaml": "YAML",
    ".toml": "TOML",
    ".ini": "INI",
    ".cfg": "INI",
    ".html": "HTML",
    ".htm": "HTML",
    ".xml": "XML",
    ".svg": "SVG",
    ".md": "Markdown",
    ".vue": "Vue",
    ".svelte": "Svelte",
    ".sql": "SQL",
    ".lua": "Lua",
    ".hs": "Haskell",
    ".bat": "Batch",
    ".cmd": "Batch",
    ".ex": "Elixir",
    ".exs": "Elixir",
    ".json": "JSON",
}

_LANGUAGE_BY_FILENAME: Dict[str, str] = {
    "Dockerfile": "Dockerfile",
    "Makefile": "Makefile",
    "makefile": "Makefile",
    "Gemfile": "Ruby",
    "Rakefile": "Ruby",
}


def detect_language(path: str) -> Optional[str]:
    """Return the language tag for ``path`` or None when unrecognized."""
    name = PurePosixPath(path).name
    if name in _LANGUAGE_BY_FILENAME:
        return _LANGUAGE_BY_FILENAME[name]
    if name == ".env" or name.startswith(".env."):
        return "Dotenv"
    suffix = PurePosixPath(name).suffix.lower()
    return _LANGUAGE_BY_SUFFIX.get(suffix)


def classify_line(
    line: str, state: BlockState, syntax: Optional[CommentSyntax]
) -> Tuple[str, BlockState]:
    """Classify one line and return the tag with the state for the next line."""
    stripped = line.strip()
    if not stripped:
        return BLANK, state
    if syntax is None:
        return CODE, None

    if state is not None:
        if state in stripped:
            return COMMENT, None
        return COMMENT, state

    if stripped.startswith(syntax.line_prefixes):
        return COMMENT, None

    for start, end in syntax.block_pairs:
        if stripped.startswith(start):
            remainder = stripped[len(start):]
            if end in remainder:
                return COMMENT, None
            return COMMENT, end

    return CODE, None


def tag_lines(lines: Iterable[str], language: Optional[str]) -> Iterable[str]:
    """Yield a tag per line; state starts fresh for every call."""
    syntax = COMMENT_SYNTAX.get(language) if language else None
    state: BlockState = None
    for line in lines:
        tag, state = classify_line(line, state, syntax)
        yield tag


def classify_stream(lines: Iterable[str], language: Optional[str]) -> LineCounts:
    """Count tags over an iterable of lines without materialising it."""
    code = comment = blank = 0
    for tag in tag_lines(lines, language):
        if tag == CODE:
            code += 1
        elif tag == COMMENT:
            comment += 1
        else:
            blank += 1
    return LineCounts(code=code, comment=comment, blank=blank)


def iter_lines(text: str) -> Iterable[str]:
    """Split on newlines exactly as iterating a text-mode file handle does."""
    return io.StringIO(text)


def classify_lines(text: str, language: Optional[str]) -> LineCounts:
    return classify_stream(iter_lines(text), language)


def per_line_tags(text: str, language: Optional[str]) -> List[str]:
    return list(tag_lines(iter_lines(text), language))


__all__ = [
    "BLANK",
    "CODE",
    "COMMENT",
    "COMMENT_SYNTAX",
    "CommentSyntax",
    "classify_line",
    "classify_lines",
    "classify_stream",
    "detect_language",
    "iter_lines",
    "per_line_tags",
    "tag_lines",
]
