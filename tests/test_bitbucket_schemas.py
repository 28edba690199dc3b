from __future__ import annotations

from prdiff.bitbucket.schemas import BitbucketChange
from prdiff.bitbucket.schemas import BitbucketChangesPage
from prdiff.bitbucket.schemas import build_diff_stats
from prdiff.bitbucket.schemas import map_change_to_file_stat


def test_map_change_prefers_primary_fields() -> None:
    change = BitbucketChange.model_validate(
        {
            "path": {"toString": "src/a.py"},
            "srcPath": {"toString": "src/old_a.py"},
            "type": "MOVE",
            "nodeType": "FILE",
            "properties": {"linesAdded": 3, "linesRemoved": 1},
        }
    )
    stat = map_change_to_file_stat(change)
    assert stat.path == "src/a.py"
    assert stat.type == "MOVE"
    assert stat.additions == 3
    assert stat.deletions == 1


def test_map_change_falls_back_in_order() -> None:
    change = BitbucketChange.model_validate({"srcPath": {"toString": "gone.py"}, "nodeType": "FILE"})
    stat = map_change_to_file_stat(change)
    assert stat.path == "gone.py"
    assert stat.type == "FILE"
    assert stat.additions == 0
    assert stat.deletions == 0


def test_map_change_defaults() -> None:
    stat = map_change_to_file_stat(BitbucketChange.model_validate({"path": {}}))
    assert stat.path == "unknown"
    assert stat.type == "MODIFY"


def test_build_diff_stats_totals_and_pagination() -> None:
    page = BitbucketChangesPage.model_validate(
        {
            "values": [
                {"path": {"toString": "a.py"}, "type": "ADD", "properties": {"linesAdded": 10}},
                {"path": {"toString": "b.py"}, "type": "MODIFY", "properties": {"linesAdded": 2, "linesRemoved": 5}},
            ],
            "size": 2,
            "isLastPage": False,
            "nextPageStart": 2,
            "unrelated": "ignored",
        }
    )
    stats = build_diff_stats(page)
    assert stats.totalFiles == 2
    assert stats.totalAdditions == 12
    assert stats.totalDeletions == 5
    assert stats.isLastPage is False
    assert stats.nextStart == 2
    assert stats.showing == 2
    assert [f.path for f in stats.files] == ["a.py", "b.py"]


def test_build_diff_stats_without_size_counts_files() -> None:
    page = BitbucketChangesPage.model_validate({"values": [{"path": {"toString": "a.py"}}]})
    stats = build_diff_stats(page)
    assert stats.totalFiles == 1
    assert stats.isLastPage is None


def test_map_change_type_ignores_git_change_type() -> None:
    change = BitbucketChange.model_validate(
        {"path": {"toString": "a.py"}, "properties": {"gitChangeType": "RENAME", "linesAdded": 1}}
    )
    stat = map_change_to_file_stat(change)
    assert stat.type == "MODIFY"
    assert stat.additions == 1
