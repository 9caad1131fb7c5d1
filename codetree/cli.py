"""CLI entrypoint for codetree."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .renderers import FORMATS

_FORMAT_CHOICES = (*FORMATS, "txt", "md")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codetree",
        description=(
            "Analyse a project directory and write a report with its file tree, "
            "line and size statistics, and file contents."
        ),
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=_FORMAT_CHOICES,
        default=None,
        help="Report format (defaults to output.format in .codetree.yml, else text).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Report file name without extension (defaults to 'codetree').",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of worker threads used for file analysis.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for codetree."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()
    try:
        outcome = orchestrator.run(
            args.path,
            args.format,
            args.output,
            workers=args.workers,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    except ValueError as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        parser.exit(1, f"codetree failed: {exc}\nRun with --verbose for more details.\n")

    stats = outcome.model.statistics
    print(f"Report written to {_relativize(outcome.path)}")
    print(
        f"{stats.total_files} files, {stats.lines.total} lines "
        f"({stats.lines.code} code, {stats.lines.comment} comment, {stats.lines.blank} blank)"
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
