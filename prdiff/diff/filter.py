"""
Diff 过滤（路径过滤 + 体量上限）。

流程：
- 按 `diff --git` 切分成文件 segment
- 每个 segment 依次经过：路径 include/exclude -> maxFiles -> maxTotalLines
- 上限一旦触发就是“粘性”的：后续所有文件都被排除，不做装箱式的择优补位
- 有文件被排除时，在末尾追加 `[*** ... ***]` 格式的汇总块
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from pydantic import BaseModel, Field

from prdiff.diff.path_matcher import should_keep
from prdiff.diff.segments import FileSegment
from prdiff.diff.segments import iter_segments


class DiffFilterOptions(BaseModel):
    """过滤选项。limit 为 None 或 <= 0 都视为“不限制”。"""

    include_paths: list[str] = Field(default_factory=list)
    exclude_paths: list[str] = Field(default_factory=list)
    max_files: int | None = None
    max_total_lines: int | None = None

    @property
    def file_limit(self) -> int | None:
        return _positive_or_none(self.max_files)

    @property
    def line_limit(self) -> int | None:
        return _positive_or_none(self.max_total_lines)

    def is_noop(self) -> bool:
        return (
            not self.include_paths
            and not self.exclude_paths
            and self.file_limit is None
            and self.line_limit is None
        )


class FilterStats(BaseModel):
    included_files: int
    excluded_files: int
    total_lines: int


class FilterResult(BaseModel):
    filtered_text: str
    stats: FilterStats


@dataclass(frozen=True)
class FilterState:
    """fold 的累加器：每处理一个 segment 产生一个新的 state。"""

    included_count: int = 0
    excluded_count: int = 0
    total_lines: int = 0
    max_files_hit: bool = False
    max_lines_hit: bool = False

    @property
    def cutoff_reached(self) -> bool:
        return self.max_files_hit or self.max_lines_hit


def _positive_or_none(value: int | None) -> int | None:
    if value is None or value <= 0:
        return None
    return value


def evaluate_segment(
    state: FilterState,
    segment: FileSegment,
    options: DiffFilterOptions,
) -> tuple[FilterState, bool]:
    """
    评估单个文件 segment，返回 (新 state, 是否保留)。

    解析不出文件名的 header 用空字符串参与路径判断。
    """
    path = segment.file_name or ""
    if not should_keep(path, options.include_paths, options.exclude_paths) or state.cutoff_reached:
        return replace(state, excluded_count=state.excluded_count + 1), False

    file_limit = options.file_limit
    if file_limit is not None and state.included_count >= file_limit:
        return replace(state, excluded_count=state.excluded_count + 1, max_files_hit=True), False

    line_count = segment.content_line_count
    line_limit = options.line_limit
    if line_limit is not None and state.total_lines + line_count > line_limit:
        return replace(state, excluded_count=state.excluded_count + 1, max_lines_hit=True), False

    return (
        replace(
            state,
            included_count=state.included_count + 1,
            total_lines=state.total_lines + line_count,
        ),
        True,
    )


def _summary_lines(state: FilterState, options: DiffFilterOptions) -> list[str]:
    lines = ["", f"[*** DIFF FILTERED: {state.excluded_count} files excluded ***]"]
    if state.max_files_hit:
        lines.append(f"[*** Reached maxFiles limit of {options.file_limit} ***]")
    if state.max_lines_hit:
        lines.append(f"[*** Reached maxTotalLines limit of {options.line_limit} ***]")
    lines.append(f"[*** Showing {state.included_count} files, {state.total_lines} lines ***]")
    return lines


def filter_diff(diff_text: str, options: DiffFilterOptions) -> FilterResult:
    """
    按路径与体量上限过滤 diff。

    - 没有任何有效选项：原样返回，stats 为 (0, 0, 行数)，表示“没有做过滤”
    - 文件要么整段保留，要么整段排除；不改变文件顺序
    - preamble（第一个 `diff --git` 之前的行）原样透传
    """
    lines = diff_text.split("\n")
    if options.is_noop():
        return FilterResult(
            filtered_text=diff_text,
            stats=FilterStats(included_files=0, excluded_files=0, total_lines=len(lines)),
        )

    state = FilterState()
    result: list[str] = []
    for segment in iter_segments(lines):
        if segment.is_preamble:
            result.extend(segment.lines())
            continue
        state, keep = evaluate_segment(state=state, segment=segment, options=options)
        if keep:
            result.extend(segment.lines())

    if state.excluded_count > 0:
        result.extend(_summary_lines(state=state, options=options))

    return FilterResult(
        filtered_text="\n".join(result),
        stats=FilterStats(
            included_files=state.included_count,
            excluded_files=state.excluded_count,
            total_lines=state.total_lines,
        ),
    )
