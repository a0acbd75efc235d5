"""Aggregates per-commit statistics across every project of a GitLab group."""

from __future__ import annotations

import asyncio
import copy

from loguru import logger

from .concurrency import run_bounded
from .config import AnalysisConfig
from .diff import analyze_diff
from .errors import FetchError
from .failures import FailureLog
from .gitlab.client import GitLabClient
from .gitlab.fetcher import redact_url
from .models import (
    AuthorStats,
    Commit,
    CommitDetail,
    FailureRecord,
    Project,
    ProjectStats,
    Report,
    Stats,
)
from .refs import resolve_refs
from .report import build_report


class Aggregator:
    """Author statistics keyed by author display name.

    ``record`` may be awaited from many tasks at once; each call is applied
    as one critical section.
    """

    def __init__(self) -> None:
        self._authors: dict[str, AuthorStats] = {}
        self._lock = asyncio.Lock()

    async def record(
        self,
        commit: Commit,
        project: Project,
        stats: Stats,
        branch: str,
        tag: str,
    ) -> None:
        async with self._lock:
            author = self._authors.get(commit.author_name)
            if author is None:
                author = AuthorStats(
                    author_name=commit.author_name,
                    author_email=commit.author_email,
                )
                self._authors[commit.author_name] = author

            project_stats = author.projects.setdefault(project.name, ProjectStats())
            project_stats.commits += 1
            project_stats.add(stats)
            author.add_totals(stats)

            author.commit_details.append(CommitDetail(
                project=project.name,
                branch=branch,
                tag=tag,
                message=commit.message,
                committed_date=commit.committed_date,
            ))

    def snapshot(self) -> dict[str, AuthorStats]:
        return copy.deepcopy(self._authors)

    def __len__(self) -> int:
        return len(self._authors)


def _select_projects(projects: list[Project], config: AnalysisConfig) -> list[Project]:
    selected = [p for p in projects if p.name not in config.excluded_projects]
    if config.project_limit is not None:
        selected = selected[:config.project_limit]
    return selected


async def _record_unexpected_failure(
    failures: FailureLog,
    project: Project,
    commit: Commit,
    error: Exception,
) -> None:
    if isinstance(error, FetchError):
        if error.recorded:
            return
        url, operation = redact_url(error.url), error.operation
    else:
        url, operation = commit.id, "process commit"
    await failures.add(FailureRecord(
        url=url,
        project_name=project.name,
        author=commit.author_email,
        operation=operation,
        error=f"{type(error).__name__}: {error}",
    ))


async def aggregate_group_report(
    client: GitLabClient,
    config: AnalysisConfig,
    failures: FailureLog | None = None,
) -> Report:
    """Walk every project and commit of the configured group and build the report.

    A failure to list the group's projects or a project's commits aborts the
    run. A failure while analyzing a single commit is recorded in
    ``failures`` (the client's failure log by default) and that commit is
    left out of the statistics.
    """
    failures = failures if failures is not None else client.failure_log
    aggregator = Aggregator()

    projects = await client.list_group_projects(config.group_id, config.page_size)
    logger.info("Fetched {} projects", len(projects))
    projects = _select_projects(projects, config)
    logger.info("Analyzing {} projects", len(projects))

    async def process_commit(item: tuple[Project, Commit]) -> None:
        project, commit = item
        stats = await analyze_diff(client, project, commit, config)
        refs = await resolve_refs(client, project, commit)
        await aggregator.record(commit, project, stats, refs.branch, refs.tag)

    async def process_project(project: Project) -> int:
        logger.info("Analyzing project {}...", project.name)
        commits = await client.list_commits(project, config.start_date, config.end_date)

        results = await run_bounded(
            [(project, commit) for commit in commits],
            config.max_concurrency,
            process_commit,
        )
        skipped = 0
        for result in results:
            if not result.ok:
                skipped += 1
                _, commit = result.item
                await _record_unexpected_failure(failures, project, commit, result.error)

        if skipped:
            logger.warning(
                "Project {} done: {} commits, {} skipped", project.name, len(commits), skipped
            )
        else:
            logger.info("Project {} done: {} commits", project.name, len(commits))
        return len(commits) - skipped

    results = await run_bounded(
        projects, config.max_concurrency, process_project, abort_on_error=True
    )
    analyzed = sum(result.value or 0 for result in results)
    logger.info(
        "Analyzed {} commits by {} authors, {} failures recorded",
        analyzed, len(aggregator), len(failures),
    )
    return build_report(aggregator.snapshot(), failures.snapshot())
