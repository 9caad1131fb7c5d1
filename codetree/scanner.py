"""Directory traversal assembling the entry tree and exclusion records."""

from __future__ import annotations

import os
import stat
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence, Tuple

from .content import classify_stream, detect_language, iter_lines
from .disk_usage import DiskUsageProbe
from .exclusion import ExclusionPolicy, IgnoreRule
from .logging import get_logger
from .models import (
    Entry,
    EntryError,
    EntryKind,
    ExcludedDirectory,
    ExcludedFile,
    ExclusionDecision,
    ExclusionRule,
    LineCounts,
    RedactionRecord,
    ScanErrorKind,
    SizeMeasurement,
)
from .sensitivity import CONTENT_SAMPLE_BYTES, SensitivityDetector
from .signatures import ProjectClassifier, ProjectSignature, SignatureMatch

BINARY_SAMPLE_BYTES = 8192
_TEXT_ENCODING = "utf-8-sig"
SPECIAL_FILE = ExclusionDecision(ExclusionRule.DEFAULT, "Special file (not a regular file)")


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class FileAnalysis:
    """Result of analysing a single file; produced by worker threads."""

    size: SizeMeasurement = field(default_factory=SizeMeasurement)
    lines: LineCounts = field(default_factory=LineCounts)
    binary: bool = False
    redaction: Optional[RedactionRecord] = None
    content: Optional[str] = None
    error: Optional[EntryError] = None


@dataclass
class ScanResult:
    root: Path
    tree: Entry
    signatures: List[SignatureMatch]
    excluded_directories: List[ExcludedDirectory] = field(default_factory=list)
    excluded_files: List[ExcludedFile] = field(default_factory=list)
    redactions: List[RedactionRecord] = field(default_factory=list)
    errors: List[EntryError] = field(default_factory=list)


def _error_for(rel_path: str, exc: OSError) -> EntryError:
    if isinstance(exc, FileNotFoundError):
        kind = ScanErrorKind.PATH_NOT_FOUND
    elif isinstance(exc, PermissionError):
        kind = ScanErrorKind.PERMISSION_DENIED
    else:
        kind = ScanErrorKind.IO_ERROR
    return EntryError(path=rel_path, kind=kind, message=exc.strerror or str(exc))


def _extension(name: str) -> Optional[str]:
    suffix = PurePosixPath(name).suffix
    if not suffix or suffix == name:
        return None
    return suffix[1:].lower()


class Scanner:
    """Walks a project tree depth-first in a stable order.

    Directory listing and all bookkeeping happen on the calling thread. Per-file
    analysis and the size estimates of excluded subtrees run on a bounded
    thread pool and are merged back in traversal order.
    """

    def __init__(
        self,
        classifier: ProjectClassifier | None = None,
        policy: ExclusionPolicy | None = None,
        detector: SensitivityDetector | None = None,
        probe: DiskUsageProbe | None = None,
        *,
        user_excludes: Sequence[IgnoreRule] = (),
        workers: int | None = None,
        binary_sample_bytes: int = BINARY_SAMPLE_BYTES,
    ) -> None:
        self.classifier = classifier or ProjectClassifier()
        self.policy = policy or ExclusionPolicy()
        self.detector = detector or SensitivityDetector()
        self.probe = probe or DiskUsageProbe()
        self.user_excludes = tuple(user_excludes)
        self.workers = workers or default_workers()
        self.binary_sample_bytes = binary_sample_bytes
        self.logger = get_logger("scanner")

    def scan(self, root: str | Path) -> ScanResult:
        """Scan ``root`` and return the populated tree and side records."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        matches = self.classifier.classify(root_path)
        signatures = [match.signature for match in matches]
        if matches:
            self.logger.info(
                "Detected signatures: %s", ", ".join(m.signature.name for m in matches)
            )
        else:
            self.logger.info("No project type detected")

        tree = Entry(
            path=".",
            name=root_path.name or str(root_path),
            kind=EntryKind.DIRECTORY,
            depth=0,
        )
        result = ScanResult(root=root_path, tree=tree, signatures=matches)
        file_jobs: List[Tuple[Entry, Path]] = []
        excluded_dirs: List[Tuple[str, Path, ExclusionDecision]] = []

        self._walk(root_path, "", tree, signatures, result, file_jobs, excluded_dirs)
        self.logger.debug(
            "Traversal found %d files and %d excluded directories",
            len(file_jobs),
            len(excluded_dirs),
        )

        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="codetree-scan"
        ) as pool:
            dir_futures = [pool.submit(self._measure_subtree, path) for _, path, _ in excluded_dirs]
            analyses = pool.map(
                lambda job: self._analyze_file(job[0].path, job[1]), file_jobs
            )
            for (entry, _), analysis in zip(file_jobs, analyses):
                self._merge(entry, analysis, result)
            for (rel_path, _, decision), future in zip(excluded_dirs, dir_futures):
                size, file_count = future.result()
                result.excluded_directories.append(
                    ExcludedDirectory(
                        path=rel_path,
                        rule=decision.rule,  # type: ignore[arg-type]
                        reason=decision.reason,
                        size=size,
                        file_count=file_count,
                    )
                )

        tree.rollup()
        return result

    def _walk(
        self,
        directory: Path,
        prefix: str,
        parent: Entry,
        signatures: Sequence[ProjectSignature],
        result: ScanResult,
        file_jobs: List[Tuple[Entry, Path]],
        excluded_dirs: List[Tuple[str, Path, ExclusionDecision]],
    ) -> None:
        try:
            with os.scandir(directory) as iterator:
                listing = list(iterator)
        except OSError as exc:
            error = _error_for(parent.path, exc)
            parent.error = error
            result.errors.append(error)
            self.logger.warning("Unable to list %s: %s", parent.path, error.message)
            return

        listing.sort(key=lambda item: (not _is_real_dir(item), item.name))
        depth = parent.depth + 1
        for item in listing:
            rel_path = f"{prefix}{item.name}"
            path = Path(item.path)

            if item.is_symlink():
                decision = self.policy.decide(rel_path, EntryKind.SYMLINK, signatures, self.user_excludes)
                if not decision.included:
                    self._record_excluded_file(rel_path, path, decision, result)
                    continue
                parent.children.append(self._symlink_entry(rel_path, item.name, path, depth, result))
                continue

            if _is_real_dir(item):
                decision = self.policy.decide(rel_path, EntryKind.DIRECTORY, signatures, self.user_excludes)
                if not decision.included:
                    self.logger.debug("Excluding directory %s (%s)", rel_path, decision.reason)
                    excluded_dirs.append((rel_path, path, decision))
                    continue
                child = Entry(path=rel_path, name=item.name, kind=EntryKind.DIRECTORY, depth=depth)
                parent.children.append(child)
                self._walk(path, f"{rel_path}/", child, signatures, result, file_jobs, excluded_dirs)
                continue

            try:
                is_regular = item.is_file(follow_symlinks=False)
            except OSError:
                is_regular = False
            if not is_regular:
                self._record_excluded_file(rel_path, path, SPECIAL_FILE, result)
                continue

            decision = self.policy.decide(rel_path, EntryKind.FILE, signatures, self.user_excludes)
            if not decision.included:
                self._record_excluded_file(rel_path, path, decision, result)
                continue

            entry = Entry(
                path=rel_path,
                name=item.name,
                kind=EntryKind.FILE,
                depth=depth,
                extension=_extension(item.name),
                language=detect_language(rel_path),
            )
            parent.children.append(entry)
            file_jobs.append((entry, path))

    def _symlink_entry(
        self, rel_path: str, name: str, path: Path, depth: int, result: ScanResult
    ) -> Entry:
        entry = Entry(path=rel_path, name=name, kind=EntryKind.SYMLINK, depth=depth)
        try:
            entry.link_target = os.readlink(path)
            entry.size = self.probe.measure(path)
        except OSError as exc:
            entry.error = _error_for(rel_path, exc)
            result.errors.append(entry.error)
        self.logger.debug("Recorded symlink %s without following it", rel_path)
        return entry

    def _record_excluded_file(
        self, rel_path: str, path: Path, decision: ExclusionDecision, result: ScanResult
    ) -> None:
        try:
            size = self.probe.measure(path)
        except OSError:
            size = SizeMeasurement()
        self.logger.debug("Excluding file %s (%s)", rel_path, decision.reason)
        result.excluded_files.append(
            ExcludedFile(
                path=rel_path,
                rule=decision.rule,  # type: ignore[arg-type]
                reason=decision.reason,
                size=size,
            )
        )

    def _measure_subtree(self, directory: Path) -> Tuple[SizeMeasurement, int]:
        """Best-effort size of an excluded directory; contents are never read."""
        total = SizeMeasurement()
        file_count = 0
        for dirpath, _dirnames, filenames in os.walk(directory, followlinks=False):
            for filename in filenames:
                path = Path(dirpath) / filename
                try:
                    stat_result = os.stat(path, follow_symlinks=False)
                    if not _is_regular(stat_result):
                        continue
                    total = total + self.probe.measure(path, stat_result)
                except OSError:
                    continue
                file_count += 1
        return total, file_count

    def _analyze_file(self, rel_path: str, path: Path) -> FileAnalysis:
        language = detect_language(rel_path)
        try:
            stat_result = os.stat(path, follow_symlinks=False)
            size = self.probe.measure(path, stat_result)
            with path.open("rb") as handle:
                head = handle.read(self.binary_sample_bytes)
            if b"\x00" in head:
                return FileAnalysis(size=size, binary=True, redaction=self.detector.check_name(rel_path))

            redaction = self.detector.check_name(rel_path)
            if redaction is not None:
                with path.open("r", encoding=_TEXT_ENCODING, errors="replace") as handle:
                    lines = classify_stream(handle, language)
                return FileAnalysis(size=size, lines=lines, redaction=redaction)

            with path.open("r", encoding=_TEXT_ENCODING, errors="replace") as handle:
                text = handle.read()
        except OSError as exc:
            return FileAnalysis(error=_error_for(rel_path, exc))

        redaction = self.detector.check_content(rel_path, text[:CONTENT_SAMPLE_BYTES])
        lines = classify_stream(iter_lines(text), language)
        return FileAnalysis(
            size=size,
            lines=lines,
            redaction=redaction,
            content=None if redaction is not None else text,
        )

    def _merge(self, entry: Entry, analysis: FileAnalysis, result: ScanResult) -> None:
        if analysis.error is not None:
            entry.error = analysis.error
            result.errors.append(analysis.error)
            self.logger.warning("Unable to read %s: %s", entry.path, analysis.error.message)
            return
        entry.size = analysis.size
        entry.lines = analysis.lines
        entry.binary = analysis.binary
        entry.content = analysis.content
        if analysis.redaction is not None:
            entry.redacted = True
            result.redactions.append(analysis.redaction)
            self.logger.debug("Redacted %s (%s)", entry.path, analysis.redaction.reason.value)


def _is_real_dir(item: os.DirEntry) -> bool:
    try:
        return item.is_dir(follow_symlinks=False)
    except OSError:
        return False


def _is_regular(stat_result: os.stat_result) -> bool:
    return stat.S_ISREG(stat_result.st_mode)


__all__ = [
    "BINARY_SAMPLE_BYTES",
    "FileAnalysis",
    "SPECIAL_FILE",
    "ScanResult",
    "Scanner",
    "default_workers",
]
