"""
单文件截断：某个文件的 diff 内容行超过预算时，只保留头尾窗口。

- 头部窗口：floor(max_lines * 0.6) 行
- 尾部窗口：floor(max_lines * 0.4) 行
- 中间替换成 `[*** ... ***]` 标记块
- `@@` hunk header 始终全部保留，不计入预算（因此截断后的总行数可能超过 max_lines）
"""

from __future__ import annotations

import math

from prdiff.diff.segments import is_hunk_header
from prdiff.diff.segments import iter_segments

HEAD_RATIO = 0.6
TAIL_RATIO = 0.4
UNKNOWN_FILE_NAME = "unknown"


def truncate_file_section(hunk_lines: list[str], file_name: str, max_lines: int) -> list[str]:
    """
    截断单个文件的 hunk 部分。

    - 内容行（非 `@@` 行）数量 <= max_lines：原样返回
    - 否则：所有 `@@` 行 + 头部窗口 + 标记块 + 尾部窗口
    """
    content = [line for line in hunk_lines if not is_hunk_header(line)]
    if len(content) <= max_lines:
        return hunk_lines

    hunk_headers = [line for line in hunk_lines if is_hunk_header(line)]
    head = math.floor(max_lines * HEAD_RATIO)
    tail = math.floor(max_lines * TAIL_RATIO)
    hidden = len(content) - head - tail

    result: list[str] = []
    result.extend(hunk_headers)
    result.extend(content[:head])
    result.append("")
    result.append(f"[*** FILE TRUNCATED: {hidden} lines hidden from {file_name} ***]")
    result.append(f"[*** File had {len(content)} total lines ***]")
    result.append(f"[*** Showing first {head} and last {tail} lines ***]")
    result.append("[*** Use maxLinesPerFile=0 to see complete diff ***]")
    result.append("")
    # tail 为 0 时 content[-0:] 会取到全部内容
    result.extend(content[len(content) - tail :])
    return result


def truncate_diff(diff_text: str, max_lines_per_file: int | None) -> str:
    """
    对整份 diff 做逐文件截断。

    `max_lines_per_file` 为 None 或 <= 0 表示不限制，原样返回。
    `diff --git` 行和文件元数据行直接输出，只有 hunk 部分会进入截断逻辑。
    """
    if max_lines_per_file is None or max_lines_per_file <= 0:
        return diff_text

    result: list[str] = []
    for segment in iter_segments(diff_text.split("\n")):
        if segment.is_preamble:
            result.extend(segment.header_lines)
            continue
        result.append(segment.header_line)
        result.extend(segment.header_lines)
        if segment.hunk_lines:
            file_name = segment.file_name or UNKNOWN_FILE_NAME
            result.extend(truncate_file_section(segment.hunk_lines, file_name, max_lines_per_file))
    return "\n".join(result)
