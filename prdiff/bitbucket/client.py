"""
Bitbucket Server API 客户端（外部系统连接器）。

约定：
- 这里只做“HTTP 调用 + 错误处理 + schema 校验”，不做 diff 处理
- 发生错误时**直接抛错**，不要吞异常（便于定位与告警）
- 唯一的例外：单文件 diff 的 404 返回 None，由上层转成 warning
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from prdiff.bitbucket.schemas import BitbucketChangesPage

logger = logging.getLogger(__name__)


class BitbucketClient:
    """最小 Bitbucket Server client（只覆盖 diff 相关的三个 endpoint）。"""

    def __init__(
        self,
        api_base_url: str,
        http_client: httpx.AsyncClient,
        token: str | None = None,
        username: str | None = None,
        password: str | None = None,
    ) -> None:
        """
        - api_base_url: `{BITBUCKET_URL}/rest/api/1.0`
        - http_client: 复用的 httpx.AsyncClient
        - token 优先；否则使用 username/password 的 Basic Auth
        """
        self._api_base_url = api_base_url.rstrip("/")
        self._http_client = http_client
        self._token = token
        self._auth = httpx.BasicAuth(username, password) if not token and username and password else None

    def _headers(self, accept: str = "application/json") -> dict[str, str]:
        headers = {"Accept": accept}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _pull_request_url(self, project: str, repository: str, pr_id: int) -> str:
        return f"{self._api_base_url}/projects/{project}/repos/{repository}/pull-requests/{pr_id}"

    async def _get(self, url: str, params: dict[str, int], accept: str) -> httpx.Response:
        kwargs: dict[str, object] = {"headers": self._headers(accept=accept), "params": params}
        if self._auth is not None:
            kwargs["auth"] = self._auth
        return await self._http_client.get(url, **kwargs)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            logger.error(f"Bitbucket API error {response.status_code} for {response.request.url}")
            raise RuntimeError(f"Bitbucket API error {response.status_code}: {response.text}")

    async def get_pull_request_diff(self, project: str, repository: str, pr_id: int, context_lines: int = 10) -> str:
        """获取整个 PR 的 unified diff 原文（可能非常大）。"""
        url = f"{self._pull_request_url(project, repository, pr_id)}/diff"
        response = await self._get(url, params={"contextLines": context_lines}, accept="text/plain")
        self._raise_for_status(response)
        logger.info(f"Fetched diff for {project}/{repository}#{pr_id}: {len(response.text)} chars")
        return response.text

    async def get_pull_request_changes(
        self,
        project: str,
        repository: str,
        pr_id: int,
        limit: int = 1000,
        start: int = 0,
    ) -> BitbucketChangesPage:
        """获取 PR 的变更文件列表（一页），用 Pydantic 校验为 `BitbucketChangesPage`。"""
        url = f"{self._pull_request_url(project, repository, pr_id)}/changes"
        response = await self._get(url, params={"limit": limit, "start": start}, accept="application/json")
        self._raise_for_status(response)
        return BitbucketChangesPage.model_validate(response.json())

    async def get_file_diff(
        self,
        project: str,
        repository: str,
        pr_id: int,
        file_path: str,
        context_lines: int = 10,
    ) -> str | None:
        """获取单个文件的 diff；文件不在 PR 里（404）时返回 None。"""
        url = f"{self._pull_request_url(project, repository, pr_id)}/diff/{quote(file_path)}"
        response = await self._get(url, params={"contextLines": context_lines}, accept="text/plain")
        if response.status_code == 404:
            logger.warning(f"File not found in diff: {file_path}")
            return None
        self._raise_for_status(response)
        return response.text
