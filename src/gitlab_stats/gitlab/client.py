"""Async GitLab REST API v4 client."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from loguru import logger

from ..errors import PayloadError
from ..failures import FailureLog
from ..models import Commit, DiffEntry, Project, RefEntry
from .fetcher import RequestContext, ResilientFetcher

T = TypeVar("T")

COMMITS_PAGE_SIZE = 100

# Nested batching can exceed httpx's default pool of 100 connections.
POOL_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=20)


def _parse_items(
    items: list[Any],
    factory: Callable[[dict[str, Any]], T],
    url: str,
    operation: str,
) -> list[T]:
    try:
        return [factory(item) for item in items]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise PayloadError(url, operation, f"malformed item: {type(e).__name__}: {e}") from e


class GitLabClient:
    """Reads projects, commits, diffs and refs through a :class:`ResilientFetcher`.

    Use as an async context manager; the underlying ``httpx.AsyncClient`` is
    closed on exit unless it was passed in by the caller.
    """

    def __init__(
        self,
        api_url: str,
        token: str,
        failure_log: FailureLog,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **fetcher_options: Any,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._failure_log = failure_log
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            transport=transport, timeout=None, limits=POOL_LIMITS
        )
        self.fetcher = ResilientFetcher(self._http, token, failure_log, **fetcher_options)

    @property
    def failure_log(self) -> FailureLog:
        return self._failure_log

    async def __aenter__(self) -> GitLabClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    async def list_all(
        self,
        path: str,
        context: RequestContext,
        page_size: int,
        params: dict[str, Any] | None = None,
    ) -> list[Any]:
        """Collect every item of a paged collection.

        Pages are requested until one comes back empty; a short page does not
        end the walk. Any failed page aborts the whole walk.
        """
        url = self._url(path)
        items: list[Any] = []
        page = 1
        while True:
            page_params = {**(params or {}), "per_page": page_size, "page": page}
            payload = await self.fetcher.fetch(url, context, params=page_params)
            if not isinstance(payload, list):
                raise PayloadError(url, context.operation, "expected a JSON list")
            if not payload:
                return items
            items.extend(payload)
            page += 1

    async def list_group_projects(self, group_id: str, page_size: int) -> list[Project]:
        logger.info("Fetching projects of group {}...", group_id)
        path = f"groups/{quote(str(group_id), safe='')}/projects"
        data = await self.list_all(
            path,
            RequestContext(operation="fetch project list"),
            page_size,
            params={
                "include_subgroups": "true",
                "order_by": "last_activity_at",
                "sort": "desc",
            },
        )
        return _parse_items(data, Project.from_dict, self._url(path), "fetch project list")

    async def list_commits(self, project: Project, since: str, until: str) -> list[Commit]:
        path = f"projects/{project.id}/repository/commits"
        data = await self.list_all(
            path,
            RequestContext(operation="fetch commit list", project_name=project.name),
            COMMITS_PAGE_SIZE,
            params={"since": since, "until": until, "all": "true"},
        )
        return _parse_items(data, Commit.from_dict, self._url(path), "fetch commit list")

    async def get_commit_diff(self, project: Project, commit: Commit) -> list[DiffEntry]:
        url = self._url(f"projects/{project.id}/repository/commits/{commit.id}/diff")
        data = await self.fetcher.fetch(
            url,
            RequestContext(
                operation="fetch commit diff",
                project_name=project.name,
                author_email=commit.author_email,
            ),
        )
        if not isinstance(data, list):
            raise PayloadError(url, "fetch commit diff", "expected a JSON list")
        return _parse_items(data, DiffEntry.from_dict, url, "fetch commit diff")

    async def get_commit_refs(self, project: Project, commit: Commit) -> list[RefEntry]:
        url = self._url(f"projects/{project.id}/repository/commits/{commit.id}/refs")
        data = await self.fetcher.fetch(
            url,
            RequestContext(
                operation="fetch commit refs",
                project_name=project.name,
                author_email=commit.author_email,
            ),
        )
        if not isinstance(data, list):
            raise PayloadError(url, "fetch commit refs", "expected a JSON list")
        return _parse_items(data, RefEntry.from_dict, url, "fetch commit refs")
