"""Aggregation of per-file results into project-wide statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .models import (
    Entry,
    EntryKind,
    ExcludedDirectory,
    ExcludedFile,
    LineCounts,
    RedactionRecord,
    SizeMeasurement,
)

TOP_N = 10
NO_EXTENSION = "no_extension"
UNRECOGNIZED_LANGUAGE = "Unrecognized"


def percentage(part: int, whole: int) -> float:
    """Percentage rounded to one decimal place; zero when ``whole`` is zero."""
    if whole <= 0:
        return 0.0
    return round(part * 100.0 / whole, 1)


@dataclass
class CategoryStats:
    """Totals for one extension or language bucket."""

    files: int = 0
    lines: LineCounts = field(default_factory=LineCounts)
    size: SizeMeasurement = field(default_factory=SizeMeasurement)

    def add(self, entry: Entry) -> None:
        self.files += 1
        self.lines = self.lines + entry.lines
        self.size = self.size + entry.size

    def to_dict(self) -> Dict[str, int]:
        return {
            "files": self.files,
            "lines": self.lines.total,
            "code": self.lines.code,
            "comment": self.lines.comment,
            "blank": self.lines.blank,
            "logical_bytes": self.size.logical_bytes,
            "allocated_bytes": self.size.allocated_bytes,
        }


@dataclass(frozen=True)
class ExclusionStatistics:
    total_directories: int
    total_files: int
    total_size: SizeMeasurement
    largest_directories: Tuple[ExcludedDirectory, ...]
    largest_files: Tuple[ExcludedFile, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_directories": self.total_directories,
            "total_files": self.total_files,
            "total_logical_bytes": self.total_size.logical_bytes,
            "total_allocated_bytes": self.total_size.allocated_bytes,
            "largest_directories": [
                {
                    "path": item.path,
                    "rule": item.rule.value,
                    "reason": item.reason,
                    "logical_bytes": item.size.logical_bytes,
                    "allocated_bytes": item.size.allocated_bytes,
                    "file_count": item.file_count,
                }
                for item in self.largest_directories
            ],
            "largest_files": [
                {
                    "path": item.path,
                    "rule": item.rule.value,
                    "reason": item.reason,
                    "logical_bytes": item.size.logical_bytes,
                    "allocated_bytes": item.size.allocated_bytes,
                }
                for item in self.largest_files
            ],
        }


@dataclass(frozen=True)
class Statistics:
    total_files: int
    text_files: int
    binary_files: int
    unrecognized_files: int
    lines: LineCounts
    size: SizeMeasurement
    average_file_size: int
    by_extension: Dict[str, CategoryStats]
    by_language: Dict[str, CategoryStats]
    largest_files: Tuple[Tuple[str, int], ...]
    redacted_files: int
    error_count: int
    exclusions: ExclusionStatistics

    @property
    def code_percentage(self) -> float:
        return percentage(self.lines.code, self.lines.total)

    @property
    def comment_percentage(self) -> float:
        return percentage(self.lines.comment, self.lines.total)

    @property
    def blank_percentage(self) -> float:
        return percentage(self.lines.blank, self.lines.total)

    @property
    def content_ratio(self) -> float:
        """Logical content size as a percentage of allocated size."""
        return percentage(self.size.logical_bytes, self.size.allocated_bytes)

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_files": self.total_files,
            "text_files": self.text_files,
            "binary_files": self.binary_files,
            "unrecognized_files": self.unrecognized_files,
            "total_lines": self.lines.total,
            "code_lines": self.lines.code,
            "comment_lines": self.lines.comment,
            "blank_lines": self.lines.blank,
            "code_percentage": self.code_percentage,
            "comment_percentage": self.comment_percentage,
            "blank_percentage": self.blank_percentage,
            "logical_bytes": self.size.logical_bytes,
            "allocated_bytes": self.size.allocated_bytes,
            "average_file_size": self.average_file_size,
            "content_ratio": self.content_ratio,
            "by_extension": {key: value.to_dict() for key, value in self.by_extension.items()},
            "by_language": {key: value.to_dict() for key, value in self.by_language.items()},
            "largest_files": [
                {"path": path, "logical_bytes": size} for path, size in self.largest_files
            ],
            "redacted_files": self.redacted_files,
            "error_count": self.error_count,
            "exclusions": self.exclusions.to_dict(),
        }


def _sorted_buckets(buckets: Dict[str, CategoryStats]) -> Dict[str, CategoryStats]:
    ordered = sorted(buckets.items(), key=lambda item: (-item[1].files, item[0]))
    return dict(ordered)


class StatsAggregator:
    """Folds the scanned tree into :class:`Statistics`."""

    def __init__(self, top_n: int = TOP_N) -> None:
        self.top_n = top_n

    def aggregate(
        self,
        tree: Entry,
        redactions: Sequence[RedactionRecord],
        excluded_directories: Sequence[ExcludedDirectory],
        excluded_files: Sequence[ExcludedFile],
    ) -> Statistics:
        lines = LineCounts()
        size = SizeMeasurement()
        by_extension: Dict[str, CategoryStats] = {}
        by_language: Dict[str, CategoryStats] = {}
        sizes: List[Tuple[str, int]] = []
        total_files = binary_files = unrecognized = errors = 0

        for entry in tree.iter_files():
            if entry.error is not None:
                errors += 1
                continue
            total_files += 1
            lines = lines + entry.lines
            size = size + entry.size
            sizes.append((entry.path, entry.size.logical_bytes))

            by_extension.setdefault(entry.extension or NO_EXTENSION, CategoryStats()).add(entry)
            if entry.binary:
                binary_files += 1
                continue
            if entry.language is None:
                unrecognized += 1
            language = entry.language or UNRECOGNIZED_LANGUAGE
            by_language.setdefault(language, CategoryStats()).add(entry)

        errors += sum(
            1
            for entry in tree.iter_entries()
            if entry.error is not None and entry.kind is not EntryKind.FILE
        )

        sizes.sort(key=lambda item: (-item[1], item[0]))
        average = size.logical_bytes // total_files if total_files else 0

        return Statistics(
            total_files=total_files,
            text_files=total_files - binary_files,
            binary_files=binary_files,
            unrecognized_files=unrecognized,
            lines=lines,
            size=size,
            average_file_size=average,
            by_extension=_sorted_buckets(by_extension),
            by_language=_sorted_buckets(by_language),
            largest_files=tuple(sizes[: self.top_n]),
            redacted_files=len(redactions),
            error_count=errors,
            exclusions=self._exclusions(excluded_directories, excluded_files),
        )

    def _exclusions(
        self,
        directories: Sequence[ExcludedDirectory],
        files: Sequence[ExcludedFile],
    ) -> ExclusionStatistics:
        total = SizeMeasurement()
        file_total = 0
        for directory in directories:
            total = total + directory.size
            file_total += directory.file_count
        for item in files:
            total = total + item.size
            file_total += 1

        largest_dirs = sorted(
            directories, key=lambda item: (-item.size.allocated_bytes, item.path)
        )[: self.top_n]
        largest_files = sorted(
            files, key=lambda item: (-item.size.allocated_bytes, item.path)
        )[: self.top_n]
        return ExclusionStatistics(
            total_directories=len(directories),
            total_files=file_total,
            total_size=total,
            largest_directories=tuple(largest_dirs),
            largest_files=tuple(largest_files),
        )


__all__ = [
    "CategoryStats",
    "ExclusionStatistics",
    "NO_EXTENSION",
    "Statistics",
    "StatsAggregator",
    "TOP_N",
    "UNRECOGNIZED_LANGUAGE",
    "percentage",
]
