"""
路径匹配（glob 子集）。

支持的语法：
- `*`：任意长度字符，但不跨越 `/`
- `**`：任意长度字符，可以跨越 `/`
- `?`：单个非 `/` 字符
- 其余字符一律按字面量处理（正则元字符会先被转义）

匹配是锚定的：整条路径必须完整匹配整个 pattern。
"""

from __future__ import annotations

import re
from collections.abc import Sequence

_GLOBSTAR_PLACEHOLDER = "\x00GLOBSTAR\x00"


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """把 glob pattern 翻译成正则（锚定由 `matches` 里的 fullmatch 保证）。"""
    # re.escape 会转义 `*` 和 `?`，先转义再把它们替换回通配符
    escaped = re.escape(pattern)
    translated = (
        escaped.replace(r"\*\*", _GLOBSTAR_PLACEHOLDER)
        .replace(r"\*", "[^/]*")
        .replace(r"\?", "[^/]")
        .replace(_GLOBSTAR_PLACEHOLDER, ".*")
    )
    return re.compile(translated)


def matches(path: str, pattern: str) -> bool:
    return glob_to_regex(pattern).fullmatch(path) is not None


def should_keep(
    path: str,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
) -> bool:
    """
    组合判断：某个文件是否应该保留。

    - exclude 优先：命中任意 exclude 直接丢弃
    - include 非空时：至少命中一个 include 才保留
    - 两者都没有：全部保留
    """
    if exclude_patterns and any(matches(path, pattern) for pattern in exclude_patterns):
        return False
    if include_patterns:
        return any(matches(path, pattern) for pattern in include_patterns)
    return True
