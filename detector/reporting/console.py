# Rich console output: per-file findings tables for the local CLI.

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from detector.findings.models import FileReport, PositionedFinding, RuleId
from detector.reporting.comments import RULE_TITLES

# Rewrite hints per rule (shown with --verbose)
RULE_REMEDIATIONS: dict[RuleId, str] = {
    RuleId.UNNECESSARY_IF_ELSE: "Return or assign the condition directly, or use a conditional expression.",
    RuleId.DUPLICATE_ASSIGNMENT: "Drop the first assignment; its value is overwritten before it is read.",
    RuleId.LONG_LOOP: "Move the loop body into a named function or split the loop.",
    RuleId.EXCESSIVE_LOGGING: "Keep the log calls that carry information; lower or remove the rest.",
    RuleId.EXCESSIVE_PRINT: "Replace ad hoc prints with the project's logger.",
    RuleId.BOOLEAN_COMPARISON: "Test the value itself: `if (x)` / `if (!x)`.",
    RuleId.REDUNDANT_BOOLEAN_LITERAL: "Remove the condition and keep the branch that always runs.",
    RuleId.COUNTER_LOOP: "Iterate with forEach(), map() or reduce() instead of an index.",
    RuleId.UNUSED_VARIABLE: "Delete the declaration or use the value.",
    RuleId.DEBUG_OUTPUT: "Remove leftover console output before merging.",
}

RULE_STYLE = {
    RuleId.UNUSED_VARIABLE: "bold red",
    RuleId.DUPLICATE_ASSIGNMENT: "bold red",
    RuleId.DEBUG_OUTPUT: "bold yellow",
    RuleId.EXCESSIVE_LOGGING: "bold yellow",
    RuleId.EXCESSIVE_PRINT: "bold yellow",
}

DEFAULT_RULE_STYLE = "bold blue"


def _rule_style(rule_id: RuleId) -> str:
    return RULE_STYLE.get(rule_id, DEFAULT_RULE_STYLE)


def _position_cell(finding: PositionedFinding) -> Text:
    if finding.position is None:
        return Text("-", style="dim")
    if finding.fallback:
        return Text(f"{finding.position}*", style="yellow")
    return Text(str(finding.position))


def print_reports(
    reports: Sequence[FileReport],
    analyzed_files: Sequence[Path] | None = None,
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    """
    Print file reports grouped by file, one table each.

    The Position column is filled only when the run was given a patch;
    a trailing '*' marks a fallback anchor. With verbose, a rewrite hint is
    printed once per rule per file.
    """
    console = console or Console()
    total = sum(len(r.findings) for r in reports)

    if total == 0 and not analyzed_files:
        console.print(
            Panel(
                "[green]No wasted lines found.[/green]",
                title="Wasted Lines Detector",
                border_style="green",
                box=box.ROUNDED,
            )
        )
        return

    for report in reports:
        if not report.findings:
            continue
        console.print()
        console.print(Panel(
            f"[bold cyan]{escape(report.path)}[/bold cyan]",
            box=box.SIMPLE_HEAD,
            border_style="blue",
            padding=(0, 1),
        ))

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE,
            padding=(0, 1),
            expand=False,
        )
        table.add_column("Line", justify="right", style="dim", width=5)
        table.add_column("Pos", justify="right", width=5)
        table.add_column("Check", width=30)
        table.add_column("Message", style="white")

        for f in report.findings:
            table.add_row(
                str(f.line),
                _position_cell(f),
                Text(RULE_TITLES[f.rule_id], style=_rule_style(f.rule_id)),
                Text(f.message),
            )
        console.print(table)

        if report.dropped:
            console.print(f"  [dim]{report.dropped} finding(s) outside the diff not shown[/dim]")

        if verbose:
            seen_rules: set[RuleId] = set()
            for f in report.findings:
                if f.rule_id not in seen_rules:
                    seen_rules.add(f.rule_id)
                    console.print(f"  [dim][Fix][/dim] {escape(f'[{f.rule_id}]')} {RULE_REMEDIATIONS[f.rule_id]}")
            console.print()

    if analyzed_files:
        _print_file_summary_table(reports, analyzed_files, console)

    _print_summary(reports, console)


def _print_file_summary_table(
    reports: Sequence[FileReport],
    analyzed_files: Sequence[Path],
    console: Console,
) -> None:
    """Print a table of clean vs flagged files."""
    by_path = {r.path: len(r.findings) for r in reports if r.findings}

    table = Table(
        title="Files Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Status", width=10)
    table.add_column("Findings", justify="right", width=8)

    for p in sorted(analyzed_files, key=str):
        count = by_path.get(str(p), 0)
        status = Text("WASTED", style="bold yellow") if count else Text("OK", style="bold green")
        table.add_row(Text(str(p)), status, str(count))

    console.print()
    console.print(Panel(table, border_style="cyan", box=box.ROUNDED))


def _print_summary(reports: Sequence[FileReport], console: Console) -> None:
    by_rule: dict[RuleId, int] = {}
    for report in reports:
        for f in report.findings:
            by_rule[f.rule_id] = by_rule.get(f.rule_id, 0) + 1

    total = sum(by_rule.values())
    summary_parts = [f"[bold]{total} finding{'s' if total != 1 else ''}[/bold]"]
    for rule_id in RuleId:
        if rule_id in by_rule:
            summary_parts.append(f"[{_rule_style(rule_id)}]{by_rule[rule_id]} {rule_id}[/]")

    console.print()
    console.print(
        Panel(
            " | ".join(summary_parts),
            title="Summary",
            border_style="yellow" if total > 0 else "green",
            box=box.ROUNDED,
        )
    )
