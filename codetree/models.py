"""Core data models shared across codetree components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


class ExclusionRule(str, Enum):
    """Rules in the order the exclusion policy evaluates them."""

    OUTPUT_ARTIFACT = "excluded-as-output-artifact"
    DEFAULT = "excluded-by-default-rule"
    PROJECT = "excluded-by-project-rule"
    USER = "excluded-by-user-rule"


class RedactionReason(str, Enum):
    ENV_FILE = "env-file"
    CREDENTIAL_PATTERN = "credential-pattern"
    KEY_PATTERN = "key-pattern"
    CONNECTION_STRING = "connection-string"
    EXPLICIT_DENYLIST = "explicit-denylist"


class ScanErrorKind(str, Enum):
    PATH_NOT_FOUND = "path-not-found"
    PERMISSION_DENIED = "permission-denied"
    IO_ERROR = "io-error"


@dataclass(frozen=True)
class LineCounts:
    """Line classification totals; ``code + comment + blank == total``."""

    code: int = 0
    comment: int = 0
    blank: int = 0

    @property
    def total(self) -> int:
        return self.code + self.comment + self.blank

    def __add__(self, other: "LineCounts") -> "LineCounts":
        return LineCounts(
            code=self.code + other.code,
            comment=self.comment + other.comment,
            blank=self.blank + other.blank,
        )


@dataclass(frozen=True)
class SizeMeasurement:
    """Logical content size alongside the storage actually allocated for it."""

    logical_bytes: int = 0
    allocated_bytes: int = 0
    fallback: bool = False

    def __add__(self, other: "SizeMeasurement") -> "SizeMeasurement":
        return SizeMeasurement(
            logical_bytes=self.logical_bytes + other.logical_bytes,
            allocated_bytes=self.allocated_bytes + other.allocated_bytes,
            fallback=self.fallback or other.fallback,
        )


@dataclass(frozen=True)
class ExclusionDecision:
    """Outcome of the exclusion policy for one path."""

    rule: Optional[ExclusionRule]
    reason: str = ""

    @property
    def included(self) -> bool:
        return self.rule is None


INCLUDED = ExclusionDecision(rule=None)


@dataclass(frozen=True)
class ExcludedDirectory:
    path: str
    rule: ExclusionRule
    reason: str
    size: SizeMeasurement
    file_count: int


@dataclass(frozen=True)
class ExcludedFile:
    path: str
    rule: ExclusionRule
    reason: str
    size: SizeMeasurement


@dataclass(frozen=True)
class RedactionRecord:
    path: str
    reason: RedactionReason


@dataclass(frozen=True)
class EntryError:
    path: str
    kind: ScanErrorKind
    message: str


@dataclass
class Entry:
    """One node of the scanned tree.

    Directory sizes and line counts are aggregates over included descendants
    and are filled in by :meth:`rollup` once every file has been analysed.
    """

    path: str
    name: str
    kind: EntryKind
    depth: int
    children: List["Entry"] = field(default_factory=list)
    extension: Optional[str] = None
    language: Optional[str] = None
    size: SizeMeasurement = field(default_factory=SizeMeasurement)
    lines: LineCounts = field(default_factory=LineCounts)
    file_count: int = 0
    binary: bool = False
    redacted: bool = False
    content: Optional[str] = None
    link_target: Optional[str] = None
    error: Optional[EntryError] = None

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def iter_files(self) -> Iterator["Entry"]:
        """Yield file entries in traversal order."""
        for child in self.children:
            if child.is_dir:
                yield from child.iter_files()
            elif child.kind is EntryKind.FILE:
                yield child

    def iter_entries(self) -> Iterator["Entry"]:
        yield self
        for child in self.children:
            yield from child.iter_entries()

    def rollup(self) -> None:
        if not self.is_dir:
            return
        size = SizeMeasurement()
        lines = LineCounts()
        file_count = 0
        for child in self.children:
            if child.kind is EntryKind.SYMLINK:
                continue
            child.rollup()
            size = size + child.size
            lines = lines + child.lines
            if child.is_dir:
                file_count += child.file_count
            elif child.kind is EntryKind.FILE:
                file_count += 1
        self.size = size
        self.lines = lines
        self.file_count = file_count

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "path": self.path,
            "name": self.name,
            "kind": self.kind.value,
            "depth": self.depth,
            "logical_bytes": self.size.logical_bytes,
            "allocated_bytes": self.size.allocated_bytes,
            "lines": _lines_to_dict(self.lines),
        }
        if self.is_dir:
            payload["file_count"] = self.file_count
            payload["children"] = [child.to_dict() for child in self.children]
        else:
            payload["extension"] = self.extension
            payload["language"] = self.language
            payload["binary"] = self.binary
            payload["redacted"] = self.redacted
        if self.link_target is not None:
            payload["link_target"] = self.link_target
        if self.error is not None:
            payload["error"] = {"kind": self.error.kind.value, "message": self.error.message}
        return payload


def _lines_to_dict(lines: LineCounts) -> Dict[str, int]:
    return {
        "code": lines.code,
        "comment": lines.comment,
        "blank": lines.blank,
        "total": lines.total,
    }


__all__ = [
    "Entry",
    "EntryError",
    "EntryKind",
    "ExcludedDirectory",
    "ExcludedFile",
    "ExclusionDecision",
    "ExclusionRule",
    "INCLUDED",
    "LineCounts",
    "RedactionReason",
    "RedactionRecord",
    "ScanErrorKind",
    "SizeMeasurement",
]
