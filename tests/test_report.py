"""Tests for report shaping."""

from __future__ import annotations

import json

from gitlab_stats.models import AuthorStats, CommitDetail, FailureRecord, ProjectStats
from gitlab_stats.report import build_report, to_kib


def _author(name: str, projects: dict[str, int], details: int = 0) -> AuthorStats:
    author = AuthorStats(author_name=name, author_email=f"{name}@example.com")
    for project, size in projects.items():
        stats = ProjectStats(additions=size // 10, deletions=1, files=1, size=size, commits=1)
        stats.lines = stats.additions + stats.deletions
        author.projects[project] = stats
        author.total_commits += 1
        author.total_additions += stats.additions
        author.total_deletions += stats.deletions
        author.total_lines += stats.lines
        author.total_files += stats.files
        author.total_size += stats.size
    for i in range(details):
        author.commit_details.append(CommitDetail(
            project=next(iter(projects)),
            branch="main",
            tag="unknown",
            message=f"commit {i}",
            committed_date=f"2024-06-0{i + 1}T00:00:00Z",
        ))
    return author


def _authors() -> dict[str, AuthorStats]:
    return {
        "alice": _author("alice", {"web": 2048, "api": 10240}, details=2),
        "bob": _author("bob", {"web": 51200}, details=1),
        "carol": _author("carol", {"docs": 100, "web": 700, "api": 3000}),
    }


def test_to_kib_rounds_half_away_from_zero():
    assert to_kib(1536) == 2
    assert to_kib(2560) == 3
    assert to_kib(512) == 1
    assert to_kib(511) == 0
    assert to_kib(0) == 0
    assert to_kib(1024) == 1


def test_totals_sorted_by_size_descending():
    report = build_report(_authors(), [])

    sizes = [s.size for s in report.code_stats]
    assert sizes == sorted(sizes, reverse=True)
    assert [s.author for s in report.code_stats] == ["bob", "alice", "carol"]


def test_children_sorted_by_size_descending():
    report = build_report(_authors(), [])

    carol = report.code_stats[2]
    assert [c.project for c in carol.children] == ["api", "web", "docs"]
    for total in report.code_stats:
        sizes = [c.size for c in total.children]
        assert sizes == sorted(sizes, reverse=True)


def test_total_row_shape():
    report = build_report(_authors(), [])

    alice = report.code_stats[1]
    assert alice.key == "alice-total"
    assert alice.is_total is True
    assert alice.project == "Total"
    assert alice.size == 12
    assert alice.commits == 2
    child = alice.children[0]
    assert child.key == "alice-api"
    assert child.is_total is None
    assert child.children is None
    assert child.size == 10


def test_size_converted_once_from_raw_bytes():
    # Two projects of 700 bytes each round to 1 KiB apiece but total 1400 bytes -> 1 KiB
    author = _author("dave", {"a": 700, "b": 700})
    report = build_report({"dave": author}, [])

    total = report.code_stats[0]
    assert [c.size for c in total.children] == [1, 1]
    assert total.size == 1


def test_commit_rows_follow_author_detail_order():
    report = build_report(_authors(), [])

    assert [(c.author, c.message) for c in report.commit_stats] == [
        ("alice", "commit 0"),
        ("alice", "commit 1"),
        ("bob", "commit 0"),
    ]
    assert report.commit_stats[0].email == "alice@example.com"


def test_failures_only_present_when_recorded():
    assert build_report(_authors(), []).failure_stats is None

    record = FailureRecord(
        url="/projects/1/repository/commits/abc/diff",
        project_name="web",
        author="alice@example.com",
        operation="fetch commit diff",
        error="HTTP error! status: 500 Internal Server Error",
    )
    report = build_report(_authors(), [record])
    assert report.failure_stats == [record]


def test_build_report_is_idempotent():
    authors = _authors()
    first = json.dumps(build_report(authors, []).to_dict())
    second = json.dumps(build_report(authors, []).to_dict())

    assert first == second


def test_to_dict_wire_format():
    record = FailureRecord("/x", None, None, "fetch project list", "boom")
    data = build_report(_authors(), [record]).to_dict()

    assert set(data) == {"codeStats", "commitStats", "failureStats"}
    total = data["codeStats"][0]
    assert total["isTotal"] is True
    assert "isTotal" not in total["children"][0]
    assert "children" not in total["children"][0]
    assert "committedDate" in data["commitStats"][0]
    assert data["failureStats"][0]["project_name"] is None

    assert "failureStats" not in build_report(_authors(), []).to_dict()
