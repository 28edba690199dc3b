from __future__ import annotations

from prdiff.diff.filter import DiffFilterOptions
from prdiff.diff.filter import filter_diff
from prdiff.diff.segments import iter_segments
from prdiff.diff.segments import parse_file_name


def test_parse_file_name_uses_b_side() -> None:
    assert parse_file_name("diff --git a/old/name.py b/new/name.py") == "new/name.py"


def test_parse_file_name_returns_none_for_unexpected_header() -> None:
    assert parse_file_name("diff --git something-odd") is None


def test_iter_segments_splits_preamble_header_and_hunks() -> None:
    lines = [
        "From: someone",
        "",
        "diff --git a/a.py b/a.py",
        "index 111..222 100644",
        "--- a/a.py",
        "+++ b/a.py",
        "@@ -1,2 +1,2 @@",
        "-old",
        "+new",
        "diff --git a/b.py b/b.py",
        "new file mode 100644",
        "@@ -0,0 +1 @@",
        "+hello",
    ]
    segments = list(iter_segments(lines))
    assert len(segments) == 3

    preamble, first, second = segments
    assert preamble.is_preamble
    assert preamble.header_lines == ["From: someone", ""]

    assert first.file_name == "a.py"
    assert first.header_lines == ["index 111..222 100644", "--- a/a.py", "+++ b/a.py"]
    assert first.hunk_lines == ["@@ -1,2 +1,2 @@", "-old", "+new"]
    assert first.content_line_count == 2

    assert second.file_name == "b.py"
    assert second.header_lines == ["new file mode 100644"]
    assert second.content_line_count == 1


def test_metadata_like_lines_inside_hunk_are_content() -> None:
    lines = [
        "diff --git a/q.sql b/q.sql",
        "--- a/q.sql",
        "+++ b/q.sql",
        "@@ -1 +1 @@",
        "--- old comment",
        "+++ new comment",
    ]
    (segment,) = list(iter_segments(lines))
    assert segment.hunk_lines == ["@@ -1 +1 @@", "--- old comment", "+++ new comment"]
    assert segment.content_line_count == 2


def test_iter_segments_rebuilds_original_lines() -> None:
    lines = ["x", "diff --git a/a b/a", "index 1..2", "@@ -1 +1 @@", "-a", "+b", ""]
    rebuilt: list[str] = []
    for segment in iter_segments(lines):
        rebuilt.extend(segment.lines())
    assert rebuilt == lines


def test_iter_segments_without_preamble_yields_only_files() -> None:
    segments = list(iter_segments(["diff --git a/a b/a", "@@ -1 +1 @@", "+x"]))
    assert [s.is_preamble for s in segments] == [False]


def test_parse_file_name_strips_carriage_return() -> None:
    assert parse_file_name("diff --git a/src/a.py b/src/a.py\r") == "src/a.py"


def test_crlf_diff_still_matches_include_patterns() -> None:
    diff = "diff --git a/src/a.py b/src/a.py\r\n@@ -1 +1 @@\r\n+x\r\n"
    result = filter_diff(diff_text=diff, options=DiffFilterOptions(include_paths=["src/*.py"]))
    assert result.stats.included_files == 1
    assert result.stats.excluded_files == 0
    assert result.filtered_text == diff
