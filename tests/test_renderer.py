"""Tests for the renderer module."""

from __future__ import annotations

import json
import os
import tempfile

import pytest

from gitlab_stats.models import CodeStat, CommitStat, FailureRecord, Report
from gitlab_stats.renderer import render_csv, render_json, render_report


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


def _code_stat(author: str, project: str, size: int, **kwargs) -> CodeStat:
    defaults = dict(
        key=f"{author}-{project}",
        author=author,
        email=f"{author}@example.com",
        project=project,
        commits=3,
        additions=70,
        deletions=30,
        lines=100,
        files=4,
        size=size,
    )
    defaults.update(kwargs)
    return CodeStat(**defaults)


def _make_report(**kwargs) -> Report:
    defaults = dict(
        code_stats=[
            _code_stat(
                "alice", "Total", 12, key="alice-total", is_total=True,
                children=[_code_stat("alice", "web", 10), _code_stat("alice", "api", 2)],
            ),
            _code_stat(
                "bob", "Total", 5, key="bob-total", is_total=True,
                children=[_code_stat("bob", "web", 5)],
            ),
        ],
        commit_stats=[
            CommitStat("alice", "alice@example.com", "web", "main", "v1", "2024-06-01", "Add"),
            CommitStat("bob", "bob@example.com", "web", "dev", "unknown", "2024-06-02", "Fix"),
        ],
        failure_stats=None,
    )
    defaults.update(kwargs)
    return Report(**defaults)


def _failure() -> FailureRecord:
    return FailureRecord(
        url="/projects/9/repository/commits/abc/diff",
        project_name="broken-project",
        author="carol@example.com",
        operation="fetch commit diff",
        error="HTTP error! status: 500 Internal Server Error",
    )


def test_render_report_no_error(capsys):
    """render_report should run without error."""
    render_report(_make_report(), title="group 7")
    captured = capsys.readouterr()
    assert "group 7" in captured.out
    assert "alice" in captured.out
    assert "Code Statistics" in captured.out


def test_render_report_shows_failures(capsys):
    """render_report should warn about and list failed requests."""
    render_report(_make_report(failure_stats=[_failure()]))
    captured = capsys.readouterr()
    assert "Warning" in captured.out
    assert "broken-project" in captured.out
    assert "fetch commit diff" in captured.out


def test_render_report_escapes_markup(capsys):
    """Names that look like rich markup are printed verbatim."""
    report = _make_report(code_stats=[
        _code_stat("renovate[bot]", "Total", 1, is_total=True, children=[]),
    ])
    render_report(report)
    captured = capsys.readouterr()
    assert "renovate[bot]" in captured.out


def test_render_report_top_n(capsys):
    render_report(_make_report(), top_n=1)
    captured = capsys.readouterr()
    assert "top 1" in captured.out
    assert "bob@example.com" not in captured.out


def test_render_json(capsys):
    """render_json should output the report's wire format."""
    render_json(_make_report())
    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert len(data["codeStats"]) == 2
    assert data["codeStats"][0]["isTotal"] is True
    assert len(data["codeStats"][0]["children"]) == 2
    assert data["commitStats"][1]["branch"] == "dev"
    assert "failureStats" not in data


def test_render_json_includes_failures(capsys):
    render_json(_make_report(failure_stats=[_failure()]))
    data = json.loads(capsys.readouterr().out)
    assert data["failureStats"][0]["project_name"] == "broken-project"


def test_render_csv(capsys):
    """render_csv should output one row per total and per project."""
    render_csv(_make_report())
    captured = capsys.readouterr()
    lines = [line.strip() for line in captured.out.strip().split("\n")]
    assert lines[0] == "author,email,project,commits,additions,deletions,lines,files,size_kib,is_total"
    assert lines[1] == "alice,alice@example.com,Total,3,70,30,100,4,12,True"
    assert lines[2] == "alice,alice@example.com,web,3,70,30,100,4,10,False"
    assert len(lines) == 6


def test_render_json_to_file():
    """render_json should write to file when output_file is specified."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        path = f.name
    try:
        render_json(_make_report(), output_file=path)
        with open(path, encoding="utf-8") as f:
            data = json.loads(f.read())
        assert data["codeStats"][0]["author"] == "alice"
    finally:
        os.unlink(path)


def test_render_csv_to_file():
    """render_csv should write to file when output_file is specified."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        path = f.name
    try:
        render_csv(_make_report(), output_file=path)
        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert "bob,bob@example.com,web,3,70,30,100,4,5,False" in content
    finally:
        os.unlink(path)


def test_render_report_to_file():
    """render_report should write to file when output_file is specified."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False) as f:
        path = f.name
    try:
        render_report(_make_report(), title="group 7", output_file=path)
        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert "group 7" in content
    finally:
        os.unlink(path)
