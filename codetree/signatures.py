"""Project type and framework detection from marker files.

Detection looks only at paths within a shallow depth of the root and at the
text of a fixed set of manifest files, so the outcome never depends on how the
rest of the tree is laid out or listed.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .exclusion import DEFAULT_EXCLUDED_DIRS
from .logging import get_logger

PROJECT = "project"
FRAMEWORK = "framework"

MARKER_DEPTH = 2
MAX_MANIFEST_BYTES = 1024 * 1024

# Only these files are ever read for keyword evidence.
MANIFEST_PATTERNS: Tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "setup.py",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "composer.json",
    "Gemfile",
    "*.csproj",
)

_logger = get_logger("signatures")


@dataclass(frozen=True)
class MarkerEvidence:
    """Relative posix paths near the root plus the text of manifest files."""

    paths: FrozenSet[str]
    contents: Mapping[str, str] = field(default_factory=dict)


class MarkerPredicate:
    """Base class for a single, independently testable detection rule."""

    def matches(self, evidence: MarkerEvidence) -> bool:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class MarkerFile(MarkerPredicate):
    """True when any path near the root matches ``pattern``."""

    pattern: str

    def matches(self, evidence: MarkerEvidence) -> bool:
        return any(fnmatchcase(path, self.pattern) for path in evidence.paths)


@dataclass(frozen=True)
class FileContains(MarkerPredicate):
    """True when a manifest matching ``pattern`` contains ``needle``."""

    pattern: str
    needle: str
    ignore_case: bool = False

    def matches(self, evidence: MarkerEvidence) -> bool:
        needle = self.needle.lower() if self.ignore_case else self.needle
        for path in sorted(evidence.contents):
            if not fnmatchcase(path, self.pattern):
                continue
            text = evidence.contents[path]
            if self.ignore_case:
                text = text.lower()
            if needle in text:
                return True
        return False


@dataclass(frozen=True)
class AllOf(MarkerPredicate):
    predicates: Tuple[MarkerPredicate, ...]

    def matches(self, evidence: MarkerEvidence) -> bool:
        return all(predicate.matches(evidence) for predicate in self.predicates)


@dataclass(frozen=True)
class ProjectSignature:
    """A named project type or framework.

    The signature matches when any of its predicates match. ``excluded_dirs``
    maps directory names to the reason reported when they are skipped.
    """

    name: str
    kind: str
    predicates: Tuple[MarkerPredicate, ...]
    excluded_dirs: Tuple[Tuple[str, str], ...] = ()
    category: Optional[str] = None
    package: Optional[str] = None

    def matches(self, evidence: MarkerEvidence) -> bool:
        return any(predicate.matches(evidence) for predicate in self.predicates)

    def exclusion_reason(self, dir_name: str) -> Optional[str]:
        for name, reason in self.excluded_dirs:
            if name == dir_name:
                return reason
        return None


@dataclass(frozen=True)
class SignatureMatch:
    signature: ProjectSignature
    version: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.signature.name,
            "kind": self.signature.kind,
            "category": self.signature.category,
            "version": self.version,
            "excluded_dirs": [name for name, _ in self.signature.excluded_dirs],
        }


def _npm(name: str, package: str, category: str, *extra: str, excluded=()) -> ProjectSignature:
    predicates = tuple(FileContains("package.json", f'"{needle}"') for needle in (package, *extra))
    return ProjectSignature(
        name=name,
        kind=FRAMEWORK,
        predicates=predicates,
        excluded_dirs=tuple(excluded),
        category=category,
        package=package,
    )


def _python_dep(name: str, needle: str, category: str) -> ProjectSignature:
    return ProjectSignature(
        name=name,
        kind=FRAMEWORK,
        predicates=(
            FileContains("requirements.txt", needle, ignore_case=True),
            FileContains("pyproject.toml", needle, ignore_case=True),
            FileContains("setup.py", needle, ignore_case=True),
        ),
        category=category,
    )


_BUILD_OUTPUT = "Build output directory"
_PYTHON_DIRS = (
    ("__pycache__", "Python cache directory"),
    (".pytest_cache", "Pytest cache directory"),
    (".mypy_cache", "Mypy cache directory"),
    ("venv", "Python virtual environment"),
    (".venv", "Python virtual environment"),
    ("dist", _BUILD_OUTPUT),
    ("build", _BUILD_OUTPUT),
)

SIGNATURES: Tuple[ProjectSignature, ...] = (
    ProjectSignature(
        "Rust", PROJECT, (MarkerFile("Cargo.toml"),),
        excluded_dirs=(("target", "Rust build directory"),),
    ),
    ProjectSignature(
        "Node.js", PROJECT, (MarkerFile("package.json"),),
        excluded_dirs=(
            ("node_modules", "Node.js dependencies"),
            ("dist", _BUILD_OUTPUT),
            ("build", _BUILD_OUTPUT),
        ),
    ),
    ProjectSignature(
        "Python", PROJECT,
        (MarkerFile("setup.py"), MarkerFile("requirements.txt"), MarkerFile("pyproject.toml")),
        excluded_dirs=_PYTHON_DIRS,
    ),
    ProjectSignature(
        "Java/Maven", PROJECT, (MarkerFile("pom.xml"),),
        excluded_dirs=(("target", "Maven build directory"),),
    ),
    ProjectSignature(
        "Java/Gradle", PROJECT, (MarkerFile("build.gradle"), MarkerFile("build.gradle.kts")),
        excluded_dirs=(("build", _BUILD_OUTPUT), (".gradle", "Gradle cache directory")),
    ),
    ProjectSignature(
        ".NET", PROJECT, (MarkerFile("*.csproj"), MarkerFile("*.fsproj")),
        excluded_dirs=(("bin", ".NET build directory"), ("obj", ".NET build directory")),
    ),
    ProjectSignature(
        "Go", PROJECT, (MarkerFile("go.mod"),),
        excluded_dirs=(("vendor", "Go vendored dependencies"),),
    ),
    ProjectSignature(
        "Ruby", PROJECT, (MarkerFile("Gemfile"),),
        excluded_dirs=((".bundle", "Bundler cache directory"),),
    ),
    ProjectSignature(
        "PHP", PROJECT, (MarkerFile("composer.json"),),
        excluded_dirs=(("vendor", "Composer dependencies"),),
    ),
    # JavaScript frameworks, keyed on package.json dependency names.
    _npm("React", "react", "frontend"),
    _npm("Vue.js", "vue", "frontend"),
    _npm("Angular", "@angular/core", "frontend", excluded=((".angular", "Angular cache directory"),)),
    _npm("Next.js", "next", "frontend", excluded=((".next", "Next.js build output"),)),
    _npm("Three.js", "three", "frontend"),
    _npm("Svelte", "svelte", "frontend", excluded=((".svelte-kit", "SvelteKit build output"),)),
    _npm("Tailwind CSS", "tailwindcss", "frontend"),
    _npm("Material UI", "@mui/material", "frontend", "@material-ui/core"),
    _npm("Bootstrap", "bootstrap", "frontend"),
    _npm("Chakra UI", "@chakra-ui/react", "frontend"),
    _npm("Express.js", "express", "backend"),
    _npm("NestJS", "@nestjs/core", "backend"),
    _npm("Fastify", "fastify", "backend"),
    _npm("Redux", "redux", "other"),
    _npm("MobX", "mobx", "other"),
    _npm("Jest", "jest", "testing", excluded=(("coverage", "Test coverage output"),)),
    _npm("Cypress", "cypress", "testing"),
    # Python frameworks.
    ProjectSignature(
        "Django", FRAMEWORK,
        (
            FileContains("requirements.txt", "django", ignore_case=True),
            FileContains("pyproject.toml", "django", ignore_case=True),
            AllOf((MarkerFile("manage.py"), MarkerFile("*settings.py"))),
        ),
        category="backend",
    ),
    _python_dep("Flask", "flask", "backend"),
    _python_dep("FastAPI", "fastapi", "backend"),
    _python_dep("SQLAlchemy", "sqlalchemy", "other"),
    _python_dep("Pytest", "pytest", "testing"),
    # Other ecosystems.
    ProjectSignature("Ruby on Rails", FRAMEWORK, (MarkerFile("config/routes.rb"),), category="backend"),
    ProjectSignature("Laravel", FRAMEWORK, (MarkerFile("artisan"),), category="backend"),
    ProjectSignature(
        "Symfony", FRAMEWORK,
        (AllOf((MarkerFile("bin/console"), MarkerFile("config"), MarkerFile("src/Kernel.php"))),),
        excluded_dirs=(("var", "Symfony cache directory"),),
        category="backend",
    ),
    ProjectSignature(
        "Spring Boot", FRAMEWORK,
        (
            FileContains("pom.xml", "spring-boot"),
            FileContains("build.gradle", "org.springframework.boot"),
            FileContains("build.gradle.kts", "org.springframework.boot"),
        ),
        category="backend",
    ),
    ProjectSignature("Hibernate", FRAMEWORK, (FileContains("pom.xml", "hibernate"),), category="other"),
    ProjectSignature(
        "ASP.NET Core", FRAMEWORK,
        (FileContains("*.csproj", "Microsoft.AspNetCore"), FileContains("*.csproj", "Microsoft.NET.Sdk.Web")),
        category="backend",
    ),
)


def extract_npm_version(package_json: str, package: str) -> Optional[str]:
    """Return the declared version for ``package`` in package.json text."""
    match = re.search(rf'"{re.escape(package)}"\s*:\s*"([^"]+)"', package_json)
    if match:
        return match.group(1)
    return None


def collect_evidence(root: Path, depth: int = MARKER_DEPTH) -> MarkerEvidence:
    """Gather marker paths up to ``depth`` levels below ``root``."""
    paths: List[str] = []
    pending: List[Tuple[Path, str, int]] = [(root, "", 1)]
    while pending:
        directory, prefix, level = pending.pop()
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda item: item.name)
        except OSError as exc:
            _logger.debug("Skipping marker scan of %s: %s", directory, exc)
            continue
        for entry in entries:
            rel_path = f"{prefix}{entry.name}"
            paths.append(rel_path)
            if (
                level < depth
                and entry.name not in DEFAULT_EXCLUDED_DIRS
                and entry.is_dir(follow_symlinks=False)
            ):
                pending.append((Path(entry.path), f"{rel_path}/", level + 1))

    contents: Dict[str, str] = {}
    for rel_path in sorted(paths):
        if not any(fnmatchcase(rel_path, pattern) for pattern in MANIFEST_PATTERNS):
            continue
        text = _read_manifest(root / rel_path)
        if text is not None:
            contents[rel_path] = text
    return MarkerEvidence(paths=frozenset(paths), contents=contents)


def _read_manifest(path: Path) -> Optional[str]:
    try:
        if not path.is_file() or path.stat().st_size > MAX_MANIFEST_BYTES:
            return None
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        _logger.debug("Unable to read manifest %s: %s", path, exc)
        return None


class ProjectClassifier:
    """Matches every signature against marker evidence near the root."""

    def __init__(self, signatures: Sequence[ProjectSignature] = SIGNATURES) -> None:
        self.signatures = tuple(signatures)

    def classify(self, root: Path) -> List[SignatureMatch]:
        return self.match(collect_evidence(root))

    def match(self, evidence: MarkerEvidence) -> List[SignatureMatch]:
        """Return all matching signatures in table order."""
        package_json = evidence.contents.get("package.json", "")
        matches: List[SignatureMatch] = []
        for signature in self.signatures:
            if not signature.matches(evidence):
                continue
            version = None
            if signature.package and package_json:
                version = extract_npm_version(package_json, signature.package)
            matches.append(SignatureMatch(signature=signature, version=version))
        return matches


__all__ = [
    "AllOf",
    "FRAMEWORK",
    "FileContains",
    "MarkerEvidence",
    "MarkerFile",
    "MarkerPredicate",
    "PROJECT",
    "ProjectClassifier",
    "ProjectSignature",
    "SIGNATURES",
    "SignatureMatch",
    "collect_evidence",
    "extract_npm_version",
]
