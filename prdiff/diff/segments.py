"""
Unified diff 分段（按文件切分）。

filter 与 truncator 共用同一个状态机：
- BEFORE_FILE：还没遇到任何 `diff --git` 行（preamble）
- IN_FILE_HEADER：`diff --git` 之后、第一个 `@@` 之前（index/---/+++ 等元数据）
- IN_HUNK：第一个 `@@` 之后，直到下一个 `diff --git` 或文档结束

任何状态下遇到新的 `diff --git` 行：先 flush 当前 segment，再进入 IN_FILE_HEADER。
文档结束时强制 flush。
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

FILE_HEADER_PREFIX = "diff --git "
HUNK_HEADER_PREFIX = "@@"

_FILE_HEADER_RE = re.compile(r"diff --git a/(.+) b/([^\r\n]+)")


class SegmentState(str, Enum):
    BEFORE_FILE = "before_file"
    IN_FILE_HEADER = "in_file_header"
    IN_HUNK = "in_hunk"


def parse_file_name(header_line: str) -> str | None:
    """从 `diff --git a/<old> b/<new>` 中取 b 侧路径；格式不符返回 None。"""
    match = _FILE_HEADER_RE.match(header_line)
    if match is None:
        return None
    return match.group(2)


def is_hunk_header(line: str) -> bool:
    return line.startswith(HUNK_HEADER_PREFIX)


@dataclass
class FileSegment:
    """
    一个文件对应的连续行。

    - header_line：`diff --git` 行；preamble segment 为 None
    - header_lines：第一个 `@@` 之前的元数据行（原样保留，不计入任何预算）
    - hunk_lines：从第一个 `@@` 开始的所有行（只有这部分参与截断/计数）
    """

    header_line: str | None
    header_lines: list[str] = field(default_factory=list)
    hunk_lines: list[str] = field(default_factory=list)

    @property
    def is_preamble(self) -> bool:
        return self.header_line is None

    @property
    def file_name(self) -> str | None:
        if self.header_line is None:
            return None
        return parse_file_name(self.header_line)

    @property
    def content_line_count(self) -> int:
        return sum(1 for line in self.hunk_lines if not is_hunk_header(line))

    def lines(self) -> list[str]:
        head = [] if self.header_line is None else [self.header_line]
        return head + self.header_lines + self.hunk_lines


def iter_segments(lines: Iterable[str]) -> Iterator[FileSegment]:
    """
    单次遍历，把 diff 行流切成 `FileSegment`。

    preamble（第一个 `diff --git` 之前的行）以 header_line=None 的 segment 产出，
    且只在非空时产出。每个 segment 在下一个开始之前就已经产出，调用方可以流式处理。
    """
    state = SegmentState.BEFORE_FILE
    current = FileSegment(header_line=None)

    for line in lines:
        if line.startswith(FILE_HEADER_PREFIX):
            if not current.is_preamble or current.header_lines:
                yield current
            current = FileSegment(header_line=line)
            state = SegmentState.IN_FILE_HEADER
            continue

        if state == SegmentState.IN_FILE_HEADER and is_hunk_header(line):
            state = SegmentState.IN_HUNK

        if state == SegmentState.IN_HUNK:
            current.hunk_lines.append(line)
        else:
            current.header_lines.append(line)

    if not current.is_preamble or current.header_lines:
        yield current
