"""
diff 工具：PR diff / diff stats / 指定文件 diff。

用途：
- 控制上下文长度（避免把几千个文件的 merge diff 整段塞给调用方）
- 让调用方能“按需取片段”：先看 stats，再按路径/体量过滤，或只取某几个文件
"""

from __future__ import annotations

import functools
import json
import logging

import anyio

from prdiff.bitbucket.client import BitbucketClient
from prdiff.bitbucket.schemas import build_diff_stats
from prdiff.diff.pipeline import process_diff
from prdiff.tools.schemas import GetDiffArgs
from prdiff.tools.schemas import GetDiffForFilesArgs
from prdiff.tools.schemas import GetDiffStatsArgs
from prdiff.tools.schemas import PullRequestRef
from prdiff.tools.schemas import ToolContext

logger = logging.getLogger(__name__)


def _resolve_pull_request(ref: PullRequestRef, ctx: ToolContext) -> tuple[str, str, int]:
    project = ref.project or ctx.default_project
    if not project or not ref.repository or not ref.pr_id:
        raise ValueError("Project, repository, and prId are required")
    return project, ref.repository, ref.pr_id


async def get_diff(args: GetDiffArgs, ctx: ToolContext, client: BitbucketClient) -> str:
    """
    返回经过 filter/truncate 处理后的 PR diff。

    - 单文件预算：args.max_lines_per_file > 配置默认值 > 不限制
    - 处理是纯 CPU 计算，放到线程里跑，避免大 diff 阻塞 event loop
    """
    project, repository, pr_id = _resolve_pull_request(ref=args.pull_request, ctx=ctx)
    raw = await client.get_pull_request_diff(
        project=project,
        repository=repository,
        pr_id=pr_id,
        context_lines=args.context_lines,
    )
    processed = await anyio.to_thread.run_sync(
        functools.partial(
            process_diff,
            diff_text=raw,
            filter_options=args.filter_options,
            max_lines_per_file=args.max_lines_per_file,
            default_max_lines_per_file=ctx.default_max_lines_per_file,
        )
    )
    if processed.stats is not None:
        stats = processed.stats
        logger.info(
            f"Diff filtered for {project}/{repository}#{pr_id}: "
            f"included={stats.included_files}, excluded={stats.excluded_files}, lines={stats.total_lines}"
        )
    return processed.text


async def get_diff_stats(args: GetDiffStatsArgs, ctx: ToolContext, client: BitbucketClient) -> str:
    """返回一页变更文件统计（JSON 文本，含分页信息）。"""
    project, repository, pr_id = _resolve_pull_request(ref=args.pull_request, ctx=ctx)
    page = await client.get_pull_request_changes(
        project=project,
        repository=repository,
        pr_id=pr_id,
        limit=args.limit,
        start=args.start,
    )
    stats = build_diff_stats(page)
    return json.dumps(stats.model_dump(), indent=2)


def join_file_diffs(diffs: list[tuple[str, str]], warnings: list[str]) -> str:
    """把多个文件的 diff 拼成一段文本；有 warning 时追加 `[*** WARNINGS ***]` 块。"""
    text = "\n\n".join(f"=== {path} ===\n{diff}" for path, diff in diffs)
    if warnings:
        text += "\n\n[*** WARNINGS ***]\n" + "\n".join(warnings)
    return text


async def get_diff_for_files(args: GetDiffForFilesArgs, ctx: ToolContext, client: BitbucketClient) -> str:
    """
    逐个获取指定文件的 diff。

    - 输入：file_paths（不能为空）
    - 失败：文件不在 PR 中只记 warning；其他 HTTP 错误直接抛出
    """
    project, repository, pr_id = _resolve_pull_request(ref=args.pull_request, ctx=ctx)
    if not args.file_paths:
        raise ValueError("filePaths array is required and must not be empty")

    diffs: list[tuple[str, str]] = []
    warnings: list[str] = []
    for path in args.file_paths:
        diff = await client.get_file_diff(
            project=project,
            repository=repository,
            pr_id=pr_id,
            file_path=path,
            context_lines=args.context_lines,
        )
        if diff is None:
            warnings.append(f"File not found in diff: {path}")
            continue
        diffs.append((path, diff))
    return join_file_diffs(diffs=diffs, warnings=warnings)
