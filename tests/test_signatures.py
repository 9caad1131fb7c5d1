"""Tests for codetree.signatures."""

from __future__ import annotations

import json

from codetree.signatures import (
    AllOf,
    FileContains,
    MarkerEvidence,
    MarkerFile,
    ProjectClassifier,
    collect_evidence,
    extract_npm_version,
)
from tests._fixtures.repo_builder import RepoBuilder


def _names(matches) -> list[str]:
    return [match.signature.name for match in matches]


def test_predicates_are_independently_testable() -> None:
    evidence = MarkerEvidence(
        paths=frozenset({"manage.py", "mysite", "mysite/settings.py", "requirements.txt"}),
        contents={"requirements.txt": "Django==4.2\n"},
    )

    assert MarkerFile("manage.py").matches(evidence)
    assert not MarkerFile("Cargo.toml").matches(evidence)
    assert FileContains("requirements.txt", "django", ignore_case=True).matches(evidence)
    assert not FileContains("requirements.txt", "django").matches(evidence)
    assert AllOf((MarkerFile("manage.py"), MarkerFile("*settings.py"))).matches(evidence)
    assert not AllOf((MarkerFile("manage.py"), MarkerFile("artisan"))).matches(evidence)


def test_rust_project_detected_from_manifest(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"Cargo.toml": "[package]\nname = \"demo\"\n"})

    matches = ProjectClassifier().classify(repo_builder.path())

    assert _names(matches) == ["Rust"]
    assert matches[0].signature.kind == "project"


def test_node_and_frameworks_all_reported_with_versions(repo_builder: RepoBuilder) -> None:
    manifest = {
        "name": "web",
        "dependencies": {"react": "^18.2.0", "express": "4.18.2"},
        "devDependencies": {"jest": "^29.7.0"},
    }
    repo_builder.write({"package.json": json.dumps(manifest, indent=2)})

    matches = ProjectClassifier().classify(repo_builder.path())
    by_name = {match.signature.name: match for match in matches}

    assert _names(matches) == ["Node.js", "React", "Express.js", "Jest"]
    assert by_name["React"].version == "^18.2.0"
    assert by_name["React"].signature.category == "frontend"
    assert by_name["Express.js"].version == "4.18.2"
    assert by_name["Jest"].signature.category == "testing"
    assert by_name["Node.js"].version is None


def test_unknown_project_yields_no_matches(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"notes.txt": "hello\n"})

    assert ProjectClassifier().classify(repo_builder.path()) == []


def test_marker_search_is_depth_bounded(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "services/api/package.json": '{"dependencies": {"react": "1"}}',
            "tools/go.mod": "module example.com/tools\n",
        }
    )

    evidence = collect_evidence(repo_builder.path())

    assert "tools/go.mod" in evidence.paths
    assert "services/api" in evidence.paths
    assert "services/api/package.json" not in evidence.paths
    assert _names(ProjectClassifier().match(evidence)) == []


def test_django_detected_from_manage_and_settings(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "manage.py": "import django\n",
            "mysite/settings.py": "DEBUG = True\n",
        }
    )

    assert _names(ProjectClassifier().classify(repo_builder.path())) == ["Django"]


def test_python_dependencies_detected_from_requirements(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "Flask==3.0\nSQLAlchemy>=2\npytest\n"})

    names = _names(ProjectClassifier().classify(repo_builder.path()))

    assert names == ["Python", "Flask", "SQLAlchemy", "Pytest"]


def test_only_manifest_files_are_read(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": '{"name": "x"}',
            "src/app.js": "require('react')\n",
            ".git/config": "[core]\n",
        }
    )

    evidence = collect_evidence(repo_builder.path())

    assert set(evidence.contents) == {"package.json"}
    assert ".git/config" not in evidence.paths


def test_classification_is_repeatable(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "pom.xml": "<artifactId>spring-boot-starter</artifactId><hibernate/>",
            "Gemfile": "source 'https://rubygems.org'\n",
        }
    )
    classifier = ProjectClassifier()

    first = classifier.classify(repo_builder.path())
    second = classifier.classify(repo_builder.path())

    assert first == second
    assert _names(first) == ["Java/Maven", "Ruby", "Spring Boot", "Hibernate"]


def test_extract_npm_version() -> None:
    text = '{"dependencies": {"@angular/core": "~17.0.1", "vue": "3.4.0"}}'

    assert extract_npm_version(text, "@angular/core") == "~17.0.1"
    assert extract_npm_version(text, "vue") == "3.4.0"
    assert extract_npm_version(text, "react") is None
