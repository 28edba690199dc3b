"""
FastAPI 服务入口。

这里做三件事：
- 加载配置（严格校验环境变量）
- 组装外部依赖（HTTP Client / Bitbucket client）+ 日志输出到文件
- 装配路由（health + diff）

注意：
- 业务流程不写在这里（diff 处理在 `diff/pipeline.py`，工具在 `tools/diff.py`）
- `httpx.AsyncClient` 会被复用（避免每个请求新建连接）
- 启动：`uvicorn --factory prdiff.main:build_app`
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

import httpx
from fastapi import FastAPI

from prdiff.api.routes import build_diff_router
from prdiff.bitbucket.client import BitbucketClient
from prdiff.config import load_config_from_env
from prdiff.tools.schemas import ToolContext


def configure_logging(log_file: str) -> None:
    """
    把 prdiff 的日志写到文件（单行文本格式，便于 grep）。

    可重复调用：已挂载的 FileHandler 会先被摘掉并关闭，始终只保留一个。
    """
    root = logging.getLogger("prdiff")
    for existing in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
        root.removeHandler(existing)
        existing.close()

    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.setLevel(logging.INFO)
    root.addHandler(handler)


def build_app(environ: Mapping[str, str] = os.environ) -> FastAPI:
    """创建并返回 FastAPI app（便于测试/复用）。"""

    # 1) 配置：缺失会直接抛错，启动失败（这是期望行为）
    config = load_config_from_env(environ)
    configure_logging(config.log_file)

    # 2) 可复用的 HTTP client：供 Bitbucket API 调用使用
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
    client = BitbucketClient(
        api_base_url=config.bitbucket.api_base_url,
        http_client=http_client,
        token=config.bitbucket.token,
        username=config.bitbucket.username,
        password=config.bitbucket.password,
    )
    ctx = ToolContext(
        default_project=config.bitbucket.default_project,
        default_max_lines_per_file=config.diff.max_lines_per_file,
    )

    app = FastAPI(title="PR Diff", version="0.1.0")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """健康检查：用于 k8s / LB 探活。"""
        return {"status": "ok"}

    app.include_router(build_diff_router(ctx=ctx, client=client))
    return app
