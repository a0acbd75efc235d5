"""Data models for gitlab-stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Project:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        return cls(id=int(data["id"]), name=data["name"])


@dataclass(frozen=True)
class Commit:
    id: str
    author_name: str
    author_email: str
    message: str
    committed_date: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Commit:
        return cls(
            id=data["id"],
            author_name=data.get("author_name") or "",
            author_email=data.get("author_email") or "",
            message=data.get("message") or "",
            committed_date=data.get("committed_date") or "",
        )


@dataclass(frozen=True)
class DiffEntry:
    old_path: str | None = None
    new_path: str | None = None
    diff: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiffEntry:
        return cls(
            old_path=data.get("old_path"),
            new_path=data.get("new_path"),
            diff=data.get("diff"),
        )

    @property
    def path(self) -> str:
        return self.new_path or self.old_path or ""


@dataclass(frozen=True)
class RefEntry:
    type: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RefEntry:
        return cls(type=data.get("type") or "", name=data.get("name") or "")


@dataclass
class Stats:
    additions: int = 0
    deletions: int = 0
    lines: int = 0
    files: int = 0
    size: int = 0

    def add(self, other: Stats) -> None:
        self.additions += other.additions
        self.deletions += other.deletions
        self.lines += other.lines
        self.files += other.files
        self.size += other.size


@dataclass
class ProjectStats(Stats):
    commits: int = 0


@dataclass
class CommitDetail:
    project: str
    branch: str
    tag: str
    message: str
    committed_date: str


@dataclass
class AuthorStats:
    """Rolled-up statistics for one author across every analyzed project."""

    author_name: str
    author_email: str
    projects: dict[str, ProjectStats] = field(default_factory=dict)
    total_commits: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    total_lines: int = 0
    total_files: int = 0
    total_size: int = 0
    commit_details: list[CommitDetail] = field(default_factory=list)

    def add_totals(self, stats: Stats) -> None:
        self.total_commits += 1
        self.total_additions += stats.additions
        self.total_deletions += stats.deletions
        self.total_lines += stats.lines
        self.total_files += stats.files
        self.total_size += stats.size


@dataclass
class FailureRecord:
    url: str
    project_name: str | None
    author: str | None
    operation: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "project_name": self.project_name,
            "author": self.author,
            "operation": self.operation,
            "error": self.error,
        }


@dataclass
class CodeStat:
    key: str
    author: str
    email: str
    project: str
    commits: int
    additions: int
    deletions: int
    lines: int
    files: int
    size: int
    is_total: bool | None = None
    children: list[CodeStat] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key": self.key,
            "author": self.author,
            "email": self.email,
            "project": self.project,
            "commits": self.commits,
            "additions": self.additions,
            "deletions": self.deletions,
            "lines": self.lines,
            "files": self.files,
            "size": self.size,
        }
        if self.is_total is not None:
            data["isTotal"] = self.is_total
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class CommitStat:
    author: str
    email: str
    project: str
    branch: str
    tag: str
    committed_date: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "author": self.author,
            "email": self.email,
            "project": self.project,
            "branch": self.branch,
            "tag": self.tag,
            "committedDate": self.committed_date,
            "message": self.message,
        }


@dataclass
class Report:
    code_stats: list[CodeStat] = field(default_factory=list)
    commit_stats: list[CommitStat] = field(default_factory=list)
    failure_stats: list[FailureRecord] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain structured value handed back to the host."""
        data: dict[str, Any] = {
            "codeStats": [stat.to_dict() for stat in self.code_stats],
            "commitStats": [stat.to_dict() for stat in self.commit_stats],
        }
        if self.failure_stats:
            data["failureStats"] = [record.to_dict() for record in self.failure_stats]
        return data
