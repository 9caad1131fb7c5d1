"""Exclusion policy deciding which entries are skipped during a scan."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, Sequence

from .models import INCLUDED, EntryKind, ExclusionDecision, ExclusionRule

if TYPE_CHECKING:
    from .signatures import ProjectSignature

# Built-in denylist: version control and editor metadata.
DEFAULT_EXCLUDED_DIRS: Dict[str, str] = {
    ".git": "Version control metadata",
    ".hg": "Version control metadata",
    ".svn": "Version control metadata",
    ".bzr": "Version control metadata",
    ".github": "Repository hosting metadata",
    ".gitlab": "Repository hosting metadata",
    ".idea": "Editor metadata",
    ".vscode": "Editor metadata",
    ".venv": "Virtual environment",
    ".codetree": "Codetree working directory",
}

DEFAULT_EXCLUDED_FILES: Dict[str, str] = {
    ".DS_Store": "macOS system file",
    "Thumbs.db": "Windows thumbnail cache",
    "thumbs.db": "Windows thumbnail cache",
    "Cargo.lock": "Dependency lock file",
    "package-lock.json": "Dependency lock file",
    "yarn.lock": "Dependency lock file",
    "pnpm-lock.yaml": "Dependency lock file",
}


@dataclass
class IgnoreRule:
    """A gitignore-style pattern from the ``exclude_paths`` configuration."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern or pattern.startswith("#"):
        return None

    negate = pattern.startswith("!")
    if negate:
        pattern = pattern[1:]

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def build_ignore_rules(patterns: Iterable[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for pattern in patterns:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _user_excluded(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class ExclusionPolicy:
    """Applies the exclusion rules in fixed precedence, first match wins.

    1. the report this run writes,
    2. the built-in denylist,
    3. directories declared by any matched project signature,
    4. user ``exclude_paths`` patterns.

    Decisions depend only on the path, its kind and the inputs, never on the
    order in which entries are visited.
    """

    def __init__(self, output_artifacts: Iterable[str] = ()) -> None:
        self.output_artifacts: FrozenSet[str] = frozenset(
            PurePosixPath(path).as_posix() for path in output_artifacts
        )

    def decide(
        self,
        rel_path: str,
        kind: EntryKind,
        signatures: Sequence["ProjectSignature"] = (),
        user_excludes: Sequence[IgnoreRule] = (),
    ) -> ExclusionDecision:
        name = PurePosixPath(rel_path).name
        is_dir = kind is EntryKind.DIRECTORY

        if not is_dir and rel_path in self.output_artifacts:
            return ExclusionDecision(ExclusionRule.OUTPUT_ARTIFACT, "Report output file")

        if is_dir and name in DEFAULT_EXCLUDED_DIRS:
            return ExclusionDecision(ExclusionRule.DEFAULT, DEFAULT_EXCLUDED_DIRS[name])
        if not is_dir and name in DEFAULT_EXCLUDED_FILES:
            return ExclusionDecision(ExclusionRule.DEFAULT, DEFAULT_EXCLUDED_FILES[name])

        if is_dir:
            for signature in signatures:
                reason = signature.exclusion_reason(name)
                if reason is not None:
                    return ExclusionDecision(
                        ExclusionRule.PROJECT, f"{reason} ({signature.name})"
                    )

        if user_excludes and _user_excluded(rel_path, is_dir, user_excludes):
            return ExclusionDecision(ExclusionRule.USER, "Matched exclude_paths pattern")

        return INCLUDED


__all__ = [
    "DEFAULT_EXCLUDED_DIRS",
    "DEFAULT_EXCLUDED_FILES",
    "ExclusionPolicy",
    "IgnoreRule",
    "build_ignore_rule",
    "build_ignore_rules",
]
