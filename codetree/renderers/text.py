"""Plain-text report renderer."""

from __future__ import annotations

from typing import Dict, List

from ..report import ReportModel
from ..signatures import SignatureMatch
from ..stats import Statistics
from .base import Renderer, file_summary, format_size, tree_lines

_CATEGORY_TITLES = (
    ("frontend", "Frontend"),
    ("backend", "Backend"),
    ("testing", "Testing"),
    ("other", "Other"),
)


def _heading(title: str) -> List[str]:
    return [title, "=" * len(title)]


def _describe(match: SignatureMatch) -> str:
    if match.version:
        return f"{match.signature.name} ({match.version})"
    return match.signature.name


def project_info_lines(model: ReportModel) -> List[str]:
    lines = ["Project Information:"]
    project_types = model.project_types
    if project_types:
        lines.append("Project Type: " + ", ".join(_describe(m) for m in project_types))
    else:
        lines.append("Project Type: Unknown")

    grouped: Dict[str, List[SignatureMatch]] = {}
    for match in model.frameworks:
        grouped.setdefault(match.signature.category or "other", []).append(match)
    if grouped:
        lines.append("Frameworks:")
        for key, title in _CATEGORY_TITLES:
            if key in grouped:
                lines.append(f"  {title}: " + ", ".join(_describe(m) for m in grouped[key]))
    return lines


def statistics_lines(stats: Statistics) -> List[str]:
    lines = _heading("Project Statistics:")
    lines.extend(
        [
            f"Total Files: {stats.total_files}",
            f"Text Files: {stats.text_files}",
            f"Binary Files: {stats.binary_files}",
            f"Total Lines: {stats.lines.total}",
            f"  - Code Lines: {stats.lines.code} ({stats.code_percentage:.1f}%)",
            f"  - Comment Lines: {stats.lines.comment} ({stats.comment_percentage:.1f}%)",
            f"  - Blank Lines: {stats.lines.blank} ({stats.blank_percentage:.1f}%)",
            f"Total File System Size: {format_size(stats.size.allocated_bytes)}",
            f"Total Content Size: {format_size(stats.size.logical_bytes)}",
            f"Average File Size: {format_size(stats.average_file_size)}",
        ]
    )
    if stats.size.allocated_bytes > 0 and stats.size.logical_bytes > 0:
        lines.append(f"Content to File Size Ratio: {stats.content_ratio:.1f}%")
    if stats.redacted_files:
        lines.append("")
        lines.append(
            f"Detected {stats.redacted_files} potentially sensitive file(s) "
            "that have been protected."
        )
    if stats.error_count:
        lines.append(f"Entries with scan errors: {stats.error_count}")

    if stats.by_extension:
        lines.extend(["", "Files by Type:"])
        for ext, bucket in stats.by_extension.items():
            label = ext if ext == "no_extension" else f".{ext}"
            lines.append(
                f"  {label}: {bucket.files} files, {bucket.lines.total} lines, "
                f"{format_size(bucket.size.logical_bytes)}"
            )
    if stats.by_language:
        lines.extend(["", "Files by Language:"])
        for language, bucket in stats.by_language.items():
            lines.append(f"  {language}: {bucket.files} files, {bucket.lines.total} lines")
    if stats.largest_files:
        lines.extend(["", "Largest Files:"])
        for index, (path, size) in enumerate(stats.largest_files, start=1):
            lines.append(f"  {index}. {path} - {format_size(size)}")
    return lines


def exclusion_lines(stats: Statistics) -> List[str]:
    exclusions = stats.exclusions
    if not exclusions.largest_directories and not exclusions.largest_files:
        return []
    lines = _heading("Excluded Content Analysis:")
    lines.append(
        f"Total excluded content size: {format_size(exclusions.total_size.allocated_bytes)} "
        f"({exclusions.total_files} files)"
    )
    if exclusions.largest_directories:
        lines.extend(["", "Largest Excluded Directories:"])
        for index, item in enumerate(exclusions.largest_directories, start=1):
            lines.append(
                f"  {index}. {item.path} - {format_size(item.size.allocated_bytes)} "
                f"({item.file_count} files) - {item.rule.value}: {item.reason}"
            )
    if exclusions.largest_files:
        lines.extend(["", "Largest Excluded Files:"])
        for index, item in enumerate(exclusions.largest_files, start=1):
            lines.append(
                f"  {index}. {item.path} - {format_size(item.size.allocated_bytes)} "
                f"- {item.rule.value}: {item.reason}"
            )
    return lines


class TextRenderer(Renderer):
    name = "text"
    extension = "txt"

    def render(self, model: ReportModel) -> str:
        lines = _heading("CODETREE PROJECT ANALYSIS")
        if model.generated_at is not None:
            lines.append(f"Generated: {model.generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")
        lines.append(f"Root: {model.root}")
        lines.append("")
        lines.extend(project_info_lines(model))
        lines.append("")
        lines.extend(_heading("Project File Tree:"))
        lines.extend(tree_lines(model.tree))
        lines.append("")
        lines.extend(statistics_lines(model.statistics))
        excluded = exclusion_lines(model.statistics)
        if excluded:
            lines.append("")
            lines.extend(excluded)
        if model.errors:
            lines.append("")
            lines.extend(_heading("Scan Errors:"))
            for error in model.errors:
                lines.append(f"  {error.path} - {error.kind.value}: {error.message}")
        lines.append("")
        lines.extend(_heading("Project Files:"))
        lines.append("")
        for index, payload in enumerate(model.files(), start=1):
            lines.append(f"{index}. {payload['path']}")
            lines.append(f"   {file_summary(payload)}")
            if payload["placeholder"] is not None:
                lines.append(f"   {payload['placeholder']}")
            else:
                lines.append("")
                lines.append(str(payload["content"]).rstrip("\n"))
            lines.append("")
        return "\n".join(lines) + "\n"


__all__ = ["TextRenderer", "exclusion_lines", "project_info_lines", "statistics_lines"]
