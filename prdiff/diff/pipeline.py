"""
Diff 处理 pipeline：filter（可选）-> truncate（可选）。

每一步都可跳过；跳过时文本逐字节透传。
"""

from __future__ import annotations

from pydantic import BaseModel

from prdiff.diff.filter import DiffFilterOptions
from prdiff.diff.filter import FilterStats
from prdiff.diff.filter import filter_diff
from prdiff.diff.truncator import truncate_diff


class ProcessedDiff(BaseModel):
    text: str
    stats: FilterStats | None = None


def resolve_max_lines_per_file(explicit: int | None, default: int | None) -> int | None:
    """
    决定实际生效的单文件预算：调用参数 > 配置默认值 > 不限制。

    显式传 0 会覆盖配置默认值（表示“这次要看完整 diff”）。
    """
    if explicit is not None:
        return explicit
    return default


def process_diff(
    diff_text: str,
    filter_options: DiffFilterOptions | None = None,
    max_lines_per_file: int | None = None,
    default_max_lines_per_file: int | None = None,
) -> ProcessedDiff:
    text = diff_text
    stats: FilterStats | None = None
    if filter_options is not None:
        filtered = filter_diff(diff_text=text, options=filter_options)
        text = filtered.filtered_text
        stats = filtered.stats

    effective = resolve_max_lines_per_file(explicit=max_lines_per_file, default=default_max_lines_per_file)
    if effective:
        text = truncate_diff(diff_text=text, max_lines_per_file=effective)
    return ProcessedDiff(text=text, stats=stats)
