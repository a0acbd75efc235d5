"""Command line interface for gitlab-stats."""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timedelta

import click

from . import __version__
from .config import DEFAULT_EXTENSIONS, DEFAULT_IGNORED_PATHS, MAX_PAGE_SIZE
from .errors import ConfigError, GitLabStatsError
from .log import configure_logging
from .orchestrator import run

_RELATIVE_RE = re.compile(r"^(\d+)([dwmy])$")
_UNIT_DAYS = {"d": 1, "w": 7, "m": 30, "y": 365}


def _parse_relative_date(value: str) -> str | None:
    """Turn ``7d``/``2w``/``3m``/``1y`` into a YYYY-MM-DD date that many days ago."""
    match = _RELATIVE_RE.match(value.strip())
    if not match:
        return None
    amount, unit = match.groups()
    return (datetime.now() - timedelta(days=int(amount) * _UNIT_DAYS[unit])).strftime("%Y-%m-%d")


def _resolve_date(value: str | None) -> str | None:
    if value is None:
        return None
    return _parse_relative_date(value) or value


@click.command()
@click.argument("group_id")
@click.option("--api-url", envvar="GITLAB_API_URL", required=True,
              help="GitLab API base URL, e.g. https://gitlab.example.com/api/v4 (or GITLAB_API_URL).")
@click.option("--token", envvar="GITLAB_TOKEN", required=True,
              help="GitLab access token (or GITLAB_TOKEN).")
@click.option("--since", default="7d", show_default=True,
              help="Start date (YYYY-MM-DD) or relative (7d, 2w, 3m, 1y).")
@click.option("--until", default=None,
              help="End date (YYYY-MM-DD) or relative. Defaults to now.")
@click.option("--page-size", type=click.IntRange(1, MAX_PAGE_SIZE), default=MAX_PAGE_SIZE,
              show_default=True, help="Projects requested per page.")
@click.option("--limit", "project_limit", type=click.IntRange(min=1), default=None,
              help="Only analyze the N most recently active projects.")
@click.option("--exclude-project", multiple=True, help="Project name to skip (repeatable).")
@click.option("--extension", "extensions", multiple=True,
              help="File extension to count, e.g. .py (repeatable). Defaults to web front-end types.")
@click.option("--ignore-path", "ignored_paths", multiple=True,
              help="Skip files whose path contains this text (repeatable).")
@click.option("--concurrency", type=click.IntRange(min=1), default=20, show_default=True,
              help="Requests in flight per batch. Lower it if many requests fail.")
@click.option("--top", "top_n", type=click.IntRange(min=1), default=None,
              help="Only show the top N authors in table output.")
@click.option("--format", "output_format", type=click.Choice(["table", "json", "csv"]),
              default="table", show_default=True, help="Output format.")
@click.option("--output", "output_file", type=click.Path(dir_okay=False), default=None,
              help="Write the report to a file instead of stdout.")
@click.option("--log-level", envvar="GITLAB_STATS_LOG_LEVEL", default="INFO", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level (or GITLAB_STATS_LOG_LEVEL).")
@click.version_option(version=__version__, prog_name="gitlab-stats")
def main(
    group_id: str,
    api_url: str,
    token: str,
    since: str,
    until: str | None,
    page_size: int,
    project_limit: int | None,
    exclude_project: tuple[str, ...],
    extensions: tuple[str, ...],
    ignored_paths: tuple[str, ...],
    concurrency: int,
    top_n: int | None,
    output_format: str,
    output_file: str | None,
    log_level: str,
) -> None:
    """Per-author code statistics for every project of a GitLab group.

    GROUP_ID is the numeric id or full path of the group.
    """
    configure_logging(log_level)

    resolved_until = _resolve_date(until) or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    try:
        asyncio.run(run(
            api_url=api_url,
            token=token,
            group_id=group_id,
            since=_resolve_date(since),
            until=resolved_until,
            page_size=page_size,
            exclude_projects=exclude_project,
            extensions=extensions or DEFAULT_EXTENSIONS,
            ignored_paths=ignored_paths or DEFAULT_IGNORED_PATHS,
            concurrency=concurrency,
            project_limit=project_limit,
            output_format=output_format,
            output_file=output_file,
            top_n=top_n,
        ))
    except ConfigError as e:
        raise click.UsageError(str(e)) from e
    except GitLabStatsError as e:
        raise click.ClickException(str(e)) from e
