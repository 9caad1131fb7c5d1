"""Format-agnostic report model consumed by the renderers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import Entry, EntryError, ExcludedDirectory, ExcludedFile, RedactionRecord
from .scanner import ScanResult
from .signatures import SignatureMatch
from .stats import Statistics, StatsAggregator

SCHEMA_VERSION = 1
REDACTED_PLACEHOLDER = "[SENSITIVE FILE - Content Protected]"
BINARY_PLACEHOLDER = "[BINARY FILE - Content Omitted]"
UNREADABLE_PLACEHOLDER = "[Unable to read file content]"


@dataclass(frozen=True)
class ReportModel:
    """Complete analysis result for one run; built once and never mutated."""

    root: Path
    signatures: Tuple[SignatureMatch, ...]
    tree: Entry
    statistics: Statistics
    excluded_directories: Tuple[ExcludedDirectory, ...]
    excluded_files: Tuple[ExcludedFile, ...]
    redactions: Tuple[RedactionRecord, ...]
    errors: Tuple[EntryError, ...]
    generated_at: Optional[datetime] = None

    @classmethod
    def from_scan(
        cls,
        result: ScanResult,
        aggregator: StatsAggregator | None = None,
        *,
        generated_at: Optional[datetime] = None,
    ) -> "ReportModel":
        aggregator = aggregator or StatsAggregator()
        statistics = aggregator.aggregate(
            result.tree,
            result.redactions,
            result.excluded_directories,
            result.excluded_files,
        )
        return cls(
            root=result.root,
            signatures=tuple(result.signatures),
            tree=result.tree,
            statistics=statistics,
            excluded_directories=tuple(result.excluded_directories),
            excluded_files=tuple(result.excluded_files),
            redactions=tuple(result.redactions),
            errors=tuple(result.errors),
            generated_at=generated_at or datetime.now(UTC),
        )

    @property
    def project_types(self) -> List[SignatureMatch]:
        return [match for match in self.signatures if match.signature.kind == "project"]

    @property
    def frameworks(self) -> List[SignatureMatch]:
        return [match for match in self.signatures if match.signature.kind == "framework"]

    def files(self) -> List[Dict[str, object]]:
        """Per-file payloads in tree order, with content or a placeholder."""
        payloads: List[Dict[str, object]] = []
        for entry in self.tree.iter_files():
            if entry.redacted:
                content, placeholder = None, REDACTED_PLACEHOLDER
            elif entry.binary:
                content, placeholder = None, BINARY_PLACEHOLDER
            elif entry.content is None:
                content, placeholder = None, UNREADABLE_PLACEHOLDER
            else:
                content, placeholder = entry.content, None
            payloads.append(
                {
                    "path": entry.path,
                    "language": entry.language,
                    "logical_bytes": entry.size.logical_bytes,
                    "allocated_bytes": entry.size.allocated_bytes,
                    "lines": {
                        "code": entry.lines.code,
                        "comment": entry.lines.comment,
                        "blank": entry.lines.blank,
                        "total": entry.lines.total,
                    },
                    "binary": entry.binary,
                    "redacted": entry.redacted,
                    "content": content,
                    "placeholder": placeholder,
                }
            )
        return payloads

    def to_dict(self) -> Dict[str, object]:
        """Canonical structured form; every other format is a projection of it."""
        return {
            "schema_version": SCHEMA_VERSION,
            "root": str(self.root),
            "generated_at": (
                self.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC") if self.generated_at else None
            ),
            "signatures": [match.to_dict() for match in self.signatures],
            "tree": self.tree.to_dict(),
            "statistics": self.statistics.to_dict(),
            "redactions": [
                {"path": record.path, "reason": record.reason.value} for record in self.redactions
            ],
            "excluded_directories": [
                {
                    "path": item.path,
                    "rule": item.rule.value,
                    "reason": item.reason,
                    "logical_bytes": item.size.logical_bytes,
                    "allocated_bytes": item.size.allocated_bytes,
                    "file_count": item.file_count,
                }
                for item in self.excluded_directories
            ],
            "excluded_files": [
                {
                    "path": item.path,
                    "rule": item.rule.value,
                    "reason": item.reason,
                    "logical_bytes": item.size.logical_bytes,
                    "allocated_bytes": item.size.allocated_bytes,
                }
                for item in self.excluded_files
            ],
            "errors": [
                {"path": error.path, "kind": error.kind.value, "message": error.message}
                for error in self.errors
            ],
            "files": self.files(),
        }


__all__ = [
    "BINARY_PLACEHOLDER",
    "REDACTED_PLACEHOLDER",
    "ReportModel",
    "SCHEMA_VERSION",
    "UNREADABLE_PLACEHOLDER",
]
