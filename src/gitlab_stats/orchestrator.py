"""Entry points: run an analysis and render its report."""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Any

import httpx
from loguru import logger

from .aggregator import aggregate_group_report
from .config import DEFAULT_EXTENSIONS, DEFAULT_IGNORED_PATHS, MAX_PAGE_SIZE, AnalysisConfig
from .failures import FailureLog
from .gitlab.client import GitLabClient
from .models import Report
from .renderer import render_csv, render_json, render_report


async def analyze(
    config: AnalysisConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    **fetcher_options: Any,
) -> Report:
    """Analyze the configured group and return its report.

    Raises :class:`~gitlab_stats.errors.FetchError` when the project list or a
    project's commit list cannot be fetched.
    """
    config.validate()
    started = time.monotonic()
    async with GitLabClient(
        config.api_url,
        config.token,
        FailureLog(),
        transport=transport,
        **fetcher_options,
    ) as client:
        report = await aggregate_group_report(client, config)
    logger.info("Report generated in {:.1f}s", time.monotonic() - started)
    return report


async def analyze_to_dict(data: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    """Plain-data variant of :func:`analyze` using the front-end's key names."""
    report = await analyze(AnalysisConfig.from_dict(data), **kwargs)
    return report.to_dict()


async def run(
    api_url: str,
    token: str,
    group_id: str,
    since: str,
    until: str,
    page_size: int = MAX_PAGE_SIZE,
    exclude_projects: Iterable[str] = (),
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ignored_paths: Iterable[str] = DEFAULT_IGNORED_PATHS,
    concurrency: int = 20,
    project_limit: int | None = None,
    output_format: str = "table",
    output_file: str | None = None,
    top_n: int | None = None,
) -> None:
    config = AnalysisConfig(
        api_url=api_url,
        token=token,
        group_id=group_id,
        start_date=since,
        end_date=until,
        page_size=page_size,
        excluded_projects=frozenset(exclude_projects),
        allowed_extensions=frozenset(extensions),
        max_concurrency=concurrency,
        ignored_paths=tuple(ignored_paths),
        project_limit=project_limit,
    )
    report = await analyze(config)

    if output_format == "json":
        render_json(report, output_file=output_file)
    elif output_format == "csv":
        render_csv(report, output_file=output_file)
    else:
        render_report(
            report,
            title=f"gitlab-stats: group {group_id}\nPeriod: {since} ~ {until}",
            top_n=top_n,
            output_file=output_file,
        )
