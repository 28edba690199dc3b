from __future__ import annotations

from pydantic import BaseModel, Field

from prdiff.diff.filter import DiffFilterOptions


class PullRequestRef(BaseModel):
    project: str | None = None
    repository: str | None = None
    pr_id: int | None = None


class GetDiffArgs(BaseModel):
    pull_request: PullRequestRef
    context_lines: int = 10
    max_lines_per_file: int | None = None
    filter_options: DiffFilterOptions | None = None


class GetDiffStatsArgs(BaseModel):
    pull_request: PullRequestRef
    limit: int = 1000
    start: int = 0


class GetDiffForFilesArgs(BaseModel):
    pull_request: PullRequestRef
    file_paths: list[str] = Field(default_factory=list)
    context_lines: int = 10


class ToolContext(BaseModel):
    """工具运行时的静态上下文（来自配置）。"""

    default_project: str | None = None
    default_max_lines_per_file: int | None = None
