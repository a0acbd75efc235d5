"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import csv
import io
import json
from collections import Counter

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Report

CSV_HEADER = [
    "author", "email", "project", "commits", "additions",
    "deletions", "lines", "files", "size_kib", "is_total",
]


def _format_number(n: int) -> str:
    return f"{n:,}"


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console(stderr=True).print(f"Saved to {output_file}")


def render_report(
    report: Report,
    title: str = "gitlab-stats",
    top_n: int | None = None,
    output_file: str | None = None,
) -> None:
    """Render a Report to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=140)
    else:
        console = Console()

    console.print(Panel(Text(title, justify="center"), style="bold cyan"))
    console.print()

    if report.failure_stats:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] {len(report.failure_stats)} request(s) "
            f"failed; the affected commits are not counted."
        )
        console.print()

    authors = report.code_stats if top_n is None else report.code_stats[:top_n]

    # Summary
    console.print("[bold]Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Authors", _format_number(len(report.code_stats)))
    summary.add_row("Commits", _format_number(len(report.commit_stats)))
    summary.add_row("Additions", _format_number(sum(s.additions for s in report.code_stats)))
    summary.add_row("Deletions", _format_number(sum(s.deletions for s in report.code_stats)))
    summary.add_row("Failures", _format_number(len(report.failure_stats or [])))
    console.print(summary)
    console.print()

    if authors:
        heading = "Code Statistics" if top_n is None else f"Code Statistics (top {top_n})"
        console.print(f"[bold]{heading}[/bold]")
        code_table = Table(show_header=True, header_style="bold")
        code_table.add_column("Author")
        code_table.add_column("Email", style="dim")
        code_table.add_column("Project")
        code_table.add_column("Commits", justify="right")
        code_table.add_column("Additions", justify="right")
        code_table.add_column("Deletions", justify="right")
        code_table.add_column("Lines", justify="right")
        code_table.add_column("Files", justify="right")
        code_table.add_column("Size (KiB) ▼", justify="right")

        for total in authors:
            code_table.add_row(
                f"[bold]{escape(total.author)}[/bold]",
                escape(total.email),
                f"[bold]{escape(total.project)}[/bold]",
                _format_number(total.commits),
                _format_number(total.additions),
                _format_number(total.deletions),
                _format_number(total.lines),
                _format_number(total.files),
                f"[bold blue]{_format_number(total.size)}[/bold blue]",
            )
            for child in total.children or []:
                code_table.add_row(
                    "",
                    "",
                    f"  {escape(child.project)}",
                    _format_number(child.commits),
                    _format_number(child.additions),
                    _format_number(child.deletions),
                    _format_number(child.lines),
                    _format_number(child.files),
                    _format_number(child.size),
                )
        console.print(code_table)
        console.print()

    # Commits per project
    if report.commit_stats:
        console.print("[bold]Commits by Project[/bold]")
        project_table = Table(show_header=True, header_style="bold")
        project_table.add_column("Project")
        project_table.add_column("Commits", justify="right")
        counts = Counter(c.project for c in report.commit_stats)
        for project, count in counts.most_common():
            project_table.add_row(escape(project), _format_number(count))
        console.print(project_table)
        console.print()

    if report.failure_stats:
        console.print("[bold]Failures[/bold]")
        failure_table = Table(show_header=True, header_style="bold")
        failure_table.add_column("Project")
        failure_table.add_column("Author")
        failure_table.add_column("Operation")
        failure_table.add_column("URL")
        failure_table.add_column("Error")
        for record in report.failure_stats:
            failure_table.add_row(
                escape(record.project_name or "-"),
                escape(record.author or "-"),
                escape(record.operation),
                escape(record.url),
                escape(record.error),
            )
        console.print(failure_table)
        console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(report: Report, output_file: str | None = None) -> None:
    """Render a Report as JSON."""
    content = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(report: Report, output_file: str | None = None) -> None:
    """Render code statistics as CSV, one row per author total and per project."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for total in report.code_stats:
        for row in [total, *(total.children or [])]:
            writer.writerow([
                row.author, row.email, row.project, row.commits, row.additions,
                row.deletions, row.lines, row.files, row.size, bool(row.is_total),
            ])
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
