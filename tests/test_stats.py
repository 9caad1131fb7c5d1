"""Tests for codetree.stats."""

from __future__ import annotations

from codetree.models import (
    Entry,
    EntryError,
    EntryKind,
    ExcludedDirectory,
    ExcludedFile,
    ExclusionRule,
    LineCounts,
    RedactionReason,
    RedactionRecord,
    ScanErrorKind,
    SizeMeasurement,
)
from codetree.stats import NO_EXTENSION, UNRECOGNIZED_LANGUAGE, StatsAggregator, percentage


def _file(path: str, size: int, lines: LineCounts = LineCounts(), **kwargs) -> Entry:
    name = path.rsplit("/", 1)[-1]
    extension = name.rsplit(".", 1)[-1] if "." in name.lstrip(".") else None
    return Entry(
        path=path,
        name=name,
        kind=EntryKind.FILE,
        depth=path.count("/") + 1,
        extension=kwargs.pop("extension", extension),
        size=SizeMeasurement(size, kwargs.pop("allocated", 4096)),
        lines=lines,
        **kwargs,
    )


def _tree(*files: Entry) -> Entry:
    root = Entry(path=".", name="repo", kind=EntryKind.DIRECTORY, depth=0, children=list(files))
    root.rollup()
    return root


def test_percentage_rounding_and_zero_denominator() -> None:
    assert percentage(1, 3) == 33.3
    assert percentage(2, 3) == 66.7
    assert percentage(5, 0) == 0.0


def test_totals_and_breakdowns() -> None:
    tree = _tree(
        _file("main.rs", 300, LineCounts(code=8, comment=1, blank=1), language="Rust"),
        _file("lib.rs", 100, LineCounts(code=2), language="Rust"),
        _file("README", 50, LineCounts(code=3)),
        _file("logo.png", 1000, binary=True),
    )

    stats = StatsAggregator().aggregate(tree, [], [], [])

    assert stats.total_files == 4
    assert stats.text_files == 3
    assert stats.binary_files == 1
    assert stats.unrecognized_files == 1
    assert stats.lines == LineCounts(code=13, comment=1, blank=1)
    assert stats.code_percentage == 86.7
    assert stats.comment_percentage == 6.7
    assert stats.blank_percentage == 6.7
    assert stats.size == SizeMeasurement(1450, 4 * 4096)
    assert stats.average_file_size == 362
    assert list(stats.by_extension) == ["rs", NO_EXTENSION, "png"]
    assert stats.by_extension["rs"].files == 2
    assert stats.by_extension["rs"].lines.total == 12
    assert set(stats.by_language) == {"Rust", UNRECOGNIZED_LANGUAGE}
    assert stats.content_ratio == percentage(1450, 4 * 4096)


def test_largest_files_ties_broken_by_path_and_limited() -> None:
    files = [_file(f"f{index:02d}.txt", 10) for index in range(12)]
    files.append(_file("big.txt", 99))

    stats = StatsAggregator(top_n=3).aggregate(_tree(*files), [], [], [])

    assert stats.largest_files == (("big.txt", 99), ("f00.txt", 10), ("f01.txt", 10))


def test_empty_tree_has_zero_percentages() -> None:
    stats = StatsAggregator().aggregate(_tree(), [], [], [])

    assert stats.total_files == 0
    assert stats.lines.total == 0
    assert stats.code_percentage == 0.0
    assert stats.average_file_size == 0
    assert stats.content_ratio == 0.0


def test_errored_files_are_counted_separately() -> None:
    broken = _file("locked.txt", 0)
    broken.error = EntryError("locked.txt", ScanErrorKind.PERMISSION_DENIED, "denied")

    stats = StatsAggregator().aggregate(_tree(broken, _file("ok.txt", 5)), [], [], [])

    assert stats.total_files == 1
    assert stats.error_count == 1


def test_exclusion_summary_is_separate_and_sorted_by_allocated_size() -> None:
    directories = [
        ExcludedDirectory("node_modules", ExclusionRule.PROJECT, "Node.js dependencies", SizeMeasurement(900, 8192), 40),
        ExcludedDirectory(".git", ExclusionRule.DEFAULT, "Version control metadata", SizeMeasurement(500, 8192), 10),
        ExcludedDirectory("target", ExclusionRule.PROJECT, "Rust build directory", SizeMeasurement(2000, 20480), 5),
    ]
    files = [
        ExcludedFile("Cargo.lock", ExclusionRule.DEFAULT, "Dependency lock file", SizeMeasurement(100, 4096)),
    ]
    redactions = [RedactionRecord(".env", RedactionReason.ENV_FILE)]

    stats = StatsAggregator().aggregate(_tree(_file("a.txt", 1)), redactions, directories, files)
    exclusions = stats.exclusions

    assert [d.path for d in exclusions.largest_directories] == ["target", ".git", "node_modules"]
    assert exclusions.total_directories == 3
    assert exclusions.total_files == 56
    assert exclusions.total_size == SizeMeasurement(3500, 40960)
    assert stats.size.logical_bytes == 1
    assert stats.redacted_files == 1
    payload = stats.to_dict()
    assert payload["exclusions"]["largest_directories"][0]["rule"] == "excluded-by-project-rule"
    assert payload["exclusions"]["largest_files"][0]["path"] == "Cargo.lock"
