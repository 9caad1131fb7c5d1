"""Pipeline orchestration: configure, scan, aggregate, render, write."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import CodetreeConfig, load_config
from .disk_usage import DiskUsageProbe
from .exclusion import ExclusionPolicy, build_ignore_rules
from .logging import get_logger
from .renderers import get_renderer
from .renderers.base import format_size
from .report import ReportModel
from .scanner import Scanner
from .sensitivity import SensitivityDetector
from .signatures import ProjectClassifier
from .stats import StatsAggregator

REPORT_EXTENSIONS = ("txt", "json", "md", "html")


@dataclass
class RunOutcome:
    """Result of a completed run."""

    path: Path
    model: ReportModel
    format: str


class Orchestrator:
    """Coordinates a single codetree run over one project root."""

    def __init__(
        self,
        classifier: ProjectClassifier | None = None,
        detector: SensitivityDetector | None = None,
        probe: DiskUsageProbe | None = None,
        aggregator: StatsAggregator | None = None,
    ) -> None:
        self.classifier = classifier or ProjectClassifier()
        self.detector = detector or SensitivityDetector()
        self.probe = probe or DiskUsageProbe()
        self.aggregator = aggregator or StatsAggregator()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str | Path,
        fmt: Optional[str] = None,
        output_name: Optional[str] = None,
        *,
        workers: Optional[int] = None,
    ) -> RunOutcome:
        """Analyse ``path`` and write the report beside it."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        if not root.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {path}")
        self.logger.info("Starting codetree run for %s", root)

        config = load_config(root)
        fmt = fmt or config.output.format
        output_name = output_name or config.output.name
        renderer = get_renderer(fmt)
        output_path = renderer.output_path(root, output_name)

        self._remove_stale_report(output_path)

        scanner = self._build_scanner(config, output_name, workers)
        result = scanner.scan(root)
        model = ReportModel.from_scan(result, self.aggregator)
        self.logger.info(
            "Scanned %d files (%d lines, %s), %d redacted, %d errors",
            model.statistics.total_files,
            model.statistics.lines.total,
            format_size(model.statistics.size.logical_bytes),
            model.statistics.redacted_files,
            model.statistics.error_count,
        )

        document = renderer.render(model)
        output_path.write_text(document, encoding="utf-8")
        self.logger.info("Wrote %s report to %s", renderer.name, output_path)
        return RunOutcome(path=output_path, model=model, format=renderer.name)

    def _build_scanner(
        self, config: CodetreeConfig, output_name: str, workers: Optional[int]
    ) -> Scanner:
        artifacts = [f"{output_name}.{ext}" for ext in REPORT_EXTENSIONS]
        return Scanner(
            classifier=self.classifier,
            policy=ExclusionPolicy(output_artifacts=artifacts),
            detector=self.detector,
            probe=self.probe,
            user_excludes=build_ignore_rules(config.exclude_paths),
            workers=workers or config.scan.workers,
            binary_sample_bytes=config.scan.binary_sample_bytes,
        )

    def _remove_stale_report(self, output_path: Path) -> None:
        if output_path.is_file():
            self.logger.debug("Removing previous report %s", output_path)
            output_path.unlink()


__all__ = ["Orchestrator", "REPORT_EXTENSIONS", "RunOutcome"]
