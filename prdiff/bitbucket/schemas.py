"""
Bitbucket Server API response schemas（Pydantic）+ diff stats 映射。

说明：
- 字段只覆盖 `pull-requests/{id}/changes` 需要的子集，其余字段忽略
- Bitbucket 的字段经常缺失（不同版本/不同 change 类型返回的结构不一样），
  所以每个输出字段都有一条**显式的回退规则**，写在 `map_change_to_file_stat` 里
"""

from __future__ import annotations

from pydantic import BaseModel, Field

UNKNOWN_PATH = "unknown"
DEFAULT_CHANGE_TYPE = "MODIFY"


class BitbucketPath(BaseModel):
    toString: str | None = None


class BitbucketChangeProperties(BaseModel):
    linesAdded: int | None = None
    linesRemoved: int | None = None


class BitbucketChange(BaseModel):
    """`changes` 列表中的单个 item。"""

    path: BitbucketPath | None = None
    srcPath: BitbucketPath | None = None
    type: str | None = None
    nodeType: str | None = None
    properties: BitbucketChangeProperties | None = None


class BitbucketChangesPage(BaseModel):
    """GET /projects/{p}/repos/{r}/pull-requests/{id}/changes 的分页响应。"""

    values: list[BitbucketChange] = Field(default_factory=list)
    size: int | None = None
    isLastPage: bool | None = None
    nextPageStart: int | None = None


class FileDiffStat(BaseModel):
    path: str
    additions: int
    deletions: int
    type: str


class DiffStatsResult(BaseModel):
    totalFiles: int
    totalAdditions: int
    totalDeletions: int
    files: list[FileDiffStat]
    isLastPage: bool | None = None
    nextStart: int | None = None
    showing: int


def map_change_to_file_stat(change: BitbucketChange) -> FileDiffStat:
    """
    单个 change -> `FileDiffStat`。

    回退规则（按顺序取第一个非空值）：
    - path：`path.toString` -> `srcPath.toString` -> "unknown"
    - additions：`properties.linesAdded` -> 0
    - deletions：`properties.linesRemoved` -> 0
    - type：`type` -> `nodeType` -> "MODIFY"
    """
    path = (change.path.toString if change.path else None) or (
        change.srcPath.toString if change.srcPath else None
    )
    properties = change.properties or BitbucketChangeProperties()
    return FileDiffStat(
        path=path or UNKNOWN_PATH,
        additions=properties.linesAdded or 0,
        deletions=properties.linesRemoved or 0,
        type=change.type or change.nodeType or DEFAULT_CHANGE_TYPE,
    )


def build_diff_stats(page: BitbucketChangesPage) -> DiffStatsResult:
    """
    汇总一页 changes。

    - totalFiles：响应里的 `size` -> 本页映射出的文件数
    - nextStart：对应 Bitbucket 的 `nextPageStart`
    """
    files = [map_change_to_file_stat(change) for change in page.values]
    return DiffStatsResult(
        totalFiles=page.size or len(files),
        totalAdditions=sum(f.additions for f in files),
        totalDeletions=sum(f.deletions for f in files),
        files=files,
        isLastPage=page.isLastPage,
        nextStart=page.nextPageStart,
        showing=len(files),
    )
