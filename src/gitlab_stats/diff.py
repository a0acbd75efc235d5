"""Line, file and size accounting for commit diffs."""

from __future__ import annotations

from collections.abc import Iterable

from .config import AnalysisConfig
from .gitlab.client import GitLabClient
from .models import Commit, DiffEntry, Project, Stats


def file_extension(path: str) -> str:
    """Return the extension of ``path`` with its leading dot, or "" if there is none."""
    _, dot, ext = path.rpartition(".")
    if not dot:
        return ""
    return f".{ext}"


def is_counted(path: str, allowed_extensions: Iterable[str], ignored_paths: Iterable[str]) -> bool:
    if any(ignored in path for ignored in ignored_paths):
        return False
    return file_extension(path) in allowed_extensions


def count_diff_stats(
    entries: Iterable[DiffEntry],
    allowed_extensions: Iterable[str],
    ignored_paths: Iterable[str],
) -> Stats:
    allowed = frozenset(allowed_extensions)
    ignored = tuple(ignored_paths)
    stats = Stats()

    for entry in entries:
        if not is_counted(entry.path, allowed, ignored):
            continue

        stats.files += 1
        if entry.diff is None:
            continue

        for line in entry.diff.split("\n"):
            if line.startswith("+") and not line.startswith("+++"):
                stats.additions += 1
            elif line.startswith("-") and not line.startswith("---"):
                stats.deletions += 1
        stats.size += len(entry.diff.encode("utf-8", "surrogatepass"))

    stats.lines = stats.additions + stats.deletions
    return stats


async def analyze_diff(
    client: GitLabClient,
    project: Project,
    commit: Commit,
    config: AnalysisConfig,
) -> Stats:
    entries = await client.get_commit_diff(project, commit)
    return count_diff_stats(entries, config.allowed_extensions, config.ignored_paths)
