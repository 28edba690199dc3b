from __future__ import annotations

from prdiff.diff.filter import DiffFilterOptions
from prdiff.diff.pipeline import process_diff
from prdiff.diff.pipeline import resolve_max_lines_per_file


def _file_diff(path: str, content_lines: int) -> list[str]:
    return [
        f"diff --git a/{path} b/{path}",
        f"--- a/{path}",
        f"+++ b/{path}",
        "@@ -1 +1 @@",
        *[f"+{i}" for i in range(content_lines)],
    ]


DIFF = "\n".join(_file_diff("src/a.py", 30) + _file_diff("package-lock.json", 200) + _file_diff("src/b.py", 2))


def test_no_stages_is_passthrough() -> None:
    processed = process_diff(diff_text=DIFF)
    assert processed.text == DIFF
    assert processed.stats is None


def test_filter_then_truncate() -> None:
    processed = process_diff(
        diff_text=DIFF,
        filter_options=DiffFilterOptions(exclude_paths=["*.json"]),
        max_lines_per_file=10,
    )
    assert "package-lock.json" not in processed.text
    assert "[*** FILE TRUNCATED: 20 lines hidden from src/a.py ***]" in processed.text
    assert "+0\n+1" in processed.text
    assert processed.stats is not None
    assert processed.stats.included_files == 2
    assert processed.stats.excluded_files == 1
    assert processed.stats.total_lines == 32


def test_default_budget_applies_when_not_given() -> None:
    processed = process_diff(diff_text=DIFF, default_max_lines_per_file=50)
    assert "hidden from package-lock.json" in processed.text
    assert "hidden from src/a.py" not in processed.text


def test_explicit_zero_overrides_default_budget() -> None:
    processed = process_diff(diff_text=DIFF, max_lines_per_file=0, default_max_lines_per_file=50)
    assert processed.text == DIFF


def test_resolve_max_lines_per_file() -> None:
    assert resolve_max_lines_per_file(explicit=None, default=None) is None
    assert resolve_max_lines_per_file(explicit=None, default=200) == 200
    assert resolve_max_lines_per_file(explicit=10, default=200) == 10
    assert resolve_max_lines_per_file(explicit=0, default=200) == 0
