"""
应用配置加载。

设计目标：
- **严格**：缺少必要环境变量就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/整数等，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, HttpUrl

DEFAULT_LOG_FILE = "bitbucket.log"


class BitbucketConfig(BaseModel):
    """Bitbucket Server 连接配置：token 与 username/password 二选一。"""

    base_url: HttpUrl
    token: str | None = None
    username: str | None = None
    password: str | None = None
    default_project: str | None = None

    @property
    def api_base_url(self) -> str:
        return f"{str(self.base_url).rstrip('/')}/rest/api/1.0"


class DiffConfig(BaseModel):
    """diff 输出相关的默认值（可被单次调用参数覆盖）。"""

    max_lines_per_file: int | None = None


class AppConfig(BaseModel):
    bitbucket: BitbucketConfig
    diff: DiffConfig
    log_file: str = DEFAULT_LOG_FILE


def _parse_optional_int(environ: Mapping[str, str], key: str) -> int | None:
    raw = environ.get(key)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got: {raw!r}") from exc


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：缺少 `BITBUCKET_URL`、或既没有 token 也没有完整的 username/password，抛 `ValueError`
    """
    base_url = environ.get("BITBUCKET_URL")
    if not base_url:
        raise ValueError("BITBUCKET_URL is required")

    token = environ.get("BITBUCKET_TOKEN") or None
    username = environ.get("BITBUCKET_USERNAME") or None
    password = environ.get("BITBUCKET_PASSWORD") or None
    if not token and not (username and password):
        raise ValueError("Either BITBUCKET_TOKEN or BITBUCKET_USERNAME/PASSWORD is required")

    # 交给 Pydantic 做类型校验（例如 URL 合法性）
    return AppConfig(
        bitbucket=BitbucketConfig(
            base_url=base_url,
            token=token,
            username=username,
            password=password,
            default_project=environ.get("BITBUCKET_DEFAULT_PROJECT") or None,
        ),
        diff=DiffConfig(max_lines_per_file=_parse_optional_int(environ, "BITBUCKET_DIFF_MAX_LINES_PER_FILE")),
        log_file=environ.get("BITBUCKET_LOG_FILE") or DEFAULT_LOG_FILE,
    )
