"""Configuration loading for codetree (.codetree.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".codetree.yml"
DEFAULT_OUTPUT_NAME = "codetree"
DEFAULT_FORMAT = "text"
DEFAULT_BINARY_SAMPLE_BYTES = 8192

_FORMATS = ("text", "txt", "json", "markdown", "md", "html")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class OutputConfig:
    """Report format and file name."""

    format: str = DEFAULT_FORMAT
    name: str = DEFAULT_OUTPUT_NAME


@dataclass
class ScanConfig:
    """Traversal tuning."""

    workers: Optional[int] = None
    binary_sample_bytes: int = DEFAULT_BINARY_SAMPLE_BYTES


@dataclass
class CodetreeConfig:
    """Represents the settings defined in .codetree.yml."""

    root: Path
    output: OutputConfig = field(default_factory=OutputConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> CodetreeConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CodetreeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        fmt = _as_str(output_data.get("format"))
        if fmt is not None:
            if fmt.lower() not in _FORMATS:
                raise ConfigError(f"Unsupported output.format: {fmt}")
            output.format = fmt.lower()
        name = _as_str(output_data.get("name"))
        if name:
            output.name = name

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        scan.workers = _as_positive_int(scan_data.get("workers"), "scan.workers")
        sample = _as_positive_int(
            scan_data.get("binary_sample_bytes"), "scan.binary_sample_bytes"
        )
        if sample is not None:
            scan.binary_sample_bytes = sample

    return CodetreeConfig(
        root=root,
        output=output,
        scan=scan,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_positive_int(value: Any, key: str) -> Optional[int]:
    if value is None:
        return None
    number = _as_int(value)
    if number is None or number <= 0:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    return number


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CodetreeConfig",
    "ConfigError",
    "OutputConfig",
    "ScanConfig",
    "load_config",
]
