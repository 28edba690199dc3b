"""
HTTP 接入层（diff 相关的三个操作）。

职责：
- 把 query/body 参数转成 `prdiff.tools.schemas` 里的参数模型
- 调用 `prdiff.tools.diff` 里的工具函数
- 错误映射：参数问题 -> 400，Bitbucket 上游错误（含超时/连接失败）-> 502
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import httpx
from fastapi import APIRouter
from fastapi import HTTPException
from fastapi import Query
from fastapi.responses import PlainTextResponse
from fastapi.responses import Response
from pydantic import BaseModel, Field

from prdiff.bitbucket.client import BitbucketClient
from prdiff.diff.filter import DiffFilterOptions
from prdiff.tools.diff import get_diff
from prdiff.tools.diff import get_diff_for_files
from prdiff.tools.diff import get_diff_stats
from prdiff.tools.schemas import GetDiffArgs
from prdiff.tools.schemas import GetDiffForFilesArgs
from prdiff.tools.schemas import GetDiffStatsArgs
from prdiff.tools.schemas import PullRequestRef
from prdiff.tools.schemas import ToolContext

_PR_PREFIX = "/projects/{project}/repos/{repository}/pull-requests/{pr_id}"


class DiffForFilesBody(BaseModel):
    filePaths: list[str] = Field(default_factory=list)
    contextLines: int = 10


async def _run(call: Callable[[], Awaitable[str]]) -> str:
    try:
        return await call()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (RuntimeError, httpx.HTTPError) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


def build_diff_router(ctx: ToolContext, client: BitbucketClient) -> APIRouter:
    """创建 diff 路由；ctx/client 由 app 装配时注入。"""
    router = APIRouter()

    @router.get(f"{_PR_PREFIX}/diff", response_class=PlainTextResponse)
    async def pull_request_diff(
        project: str,
        repository: str,
        pr_id: int,
        contextLines: int = 10,
        maxLinesPerFile: int | None = None,
        includePaths: list[str] = Query(default=[]),
        excludePaths: list[str] = Query(default=[]),
        maxFiles: int | None = None,
        maxTotalLines: int | None = None,
    ) -> str:
        filter_options = DiffFilterOptions(
            include_paths=includePaths,
            exclude_paths=excludePaths,
            max_files=maxFiles,
            max_total_lines=maxTotalLines,
        )
        args = GetDiffArgs(
            pull_request=PullRequestRef(project=project, repository=repository, pr_id=pr_id),
            context_lines=contextLines,
            max_lines_per_file=maxLinesPerFile,
            # 没有任何过滤参数时不走 filter（保持原文逐字节透传）
            filter_options=None if filter_options.is_noop() else filter_options,
        )
        return await _run(lambda: get_diff(args=args, ctx=ctx, client=client))

    @router.get(f"{_PR_PREFIX}/diff-stats")
    async def pull_request_diff_stats(
        project: str,
        repository: str,
        pr_id: int,
        limit: int = 1000,
        start: int = 0,
    ) -> Response:
        args = GetDiffStatsArgs(
            pull_request=PullRequestRef(project=project, repository=repository, pr_id=pr_id),
            limit=limit,
            start=start,
        )
        body = await _run(lambda: get_diff_stats(args=args, ctx=ctx, client=client))
        return Response(content=body, media_type="application/json")

    @router.post(f"{_PR_PREFIX}/diff-for-files", response_class=PlainTextResponse)
    async def pull_request_diff_for_files(
        project: str,
        repository: str,
        pr_id: int,
        body: DiffForFilesBody,
    ) -> str:
        args = GetDiffForFilesArgs(
            pull_request=PullRequestRef(project=project, repository=repository, pr_id=pr_id),
            file_paths=body.filePaths,
            context_lines=body.contextLines,
        )
        return await _run(lambda: get_diff_for_files(args=args, ctx=ctx, client=client))

    return router
