"""Tests for codetree.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from codetree.config import CodetreeConfig, ConfigError, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CodetreeConfig)
    assert config.root == tmp_path.resolve()
    assert config.output.format == "text"
    assert config.output.name == "codetree"
    assert config.scan.workers is None
    assert config.scan.binary_sample_bytes == 8192
    assert config.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".codetree.yml").write_text(
        """
output:
  format: Markdown
  name: "project-report"
scan:
  workers: 4
  binary_sample_bytes: 1024
exclude_paths:
  - "fixtures/"
  - "*.snap"
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.output.format == "markdown"
    assert config.output.name == "project-report"
    assert config.scan.workers == 4
    assert config.scan.binary_sample_bytes == 1024
    assert config.exclude_paths == ["fixtures/", "*.snap"]


def test_load_config_accepts_file_path_and_empty_file(tmp_path: Path) -> None:
    config_file = tmp_path / ".codetree.yml"
    config_file.write_text("\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.output.format == "text"


def test_exclude_paths_accepts_single_string(tmp_path: Path) -> None:
    (tmp_path / ".codetree.yml").write_text("exclude_paths: build/\n", encoding="utf-8")

    assert load_config(tmp_path).exclude_paths == ["build/"]


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "output: [unclosed\n",
        "output:\n  format: pdf\n",
        "scan:\n  workers: 0\n",
        "scan:\n  binary_sample_bytes: lots\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str) -> None:
    (tmp_path / ".codetree.yml").write_text(text, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
