"""Shapes aggregated author statistics into the final report."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .models import AuthorStats, CodeStat, CommitStat, FailureRecord, Report

TOTAL_PROJECT = "Total"


def to_kib(size: int) -> int:
    """Convert bytes to KiB, rounding halves away from zero (1536 -> 2)."""
    return (size + 512) // 1024


def _author_rows(author: AuthorStats) -> CodeStat:
    children = [
        CodeStat(
            key=f"{author.author_name}-{project_name}",
            author=author.author_name,
            email=author.author_email,
            project=project_name,
            commits=stats.commits,
            additions=stats.additions,
            deletions=stats.deletions,
            lines=stats.lines,
            files=stats.files,
            size=to_kib(stats.size),
        )
        for project_name, stats in author.projects.items()
    ]
    children.sort(key=lambda c: c.size, reverse=True)

    return CodeStat(
        key=f"{author.author_name}-total",
        author=author.author_name,
        email=author.author_email,
        project=TOTAL_PROJECT,
        commits=author.total_commits,
        additions=author.total_additions,
        deletions=author.total_deletions,
        lines=author.total_lines,
        files=author.total_files,
        size=to_kib(author.total_size),
        is_total=True,
        children=children,
    )


def build_report(
    authors: Mapping[str, AuthorStats],
    failures: Sequence[FailureRecord],
) -> Report:
    code_stats: list[CodeStat] = []
    commit_stats: list[CommitStat] = []

    for author in authors.values():
        code_stats.append(_author_rows(author))
        for detail in author.commit_details:
            commit_stats.append(CommitStat(
                author=author.author_name,
                email=author.author_email,
                project=detail.project,
                branch=detail.branch,
                tag=detail.tag,
                committed_date=detail.committed_date,
                message=detail.message,
            ))

    code_stats.sort(key=lambda c: c.size, reverse=True)

    return Report(
        code_stats=code_stats,
        commit_stats=commit_stats,
        failure_stats=list(failures) if failures else None,
    )
