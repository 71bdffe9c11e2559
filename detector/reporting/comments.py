# Markdown for pull request comments: one body per review comment plus the summary report.

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from detector.findings.models import FileReport, PositionedFinding, RuleId

RULE_TITLES: dict[RuleId, str] = {
    RuleId.UNNECESSARY_IF_ELSE: "Unnecessary if-else block",
    RuleId.DUPLICATE_ASSIGNMENT: "Duplicate variable assignment",
    RuleId.LONG_LOOP: "Long loop",
    RuleId.EXCESSIVE_LOGGING: "Excessive logging",
    RuleId.EXCESSIVE_PRINT: "Too many print statements",
    RuleId.BOOLEAN_COMPARISON: "Simplifiable boolean comparison",
    RuleId.REDUNDANT_BOOLEAN_LITERAL: "Redundant boolean literal",
    RuleId.COUNTER_LOOP: "Counting loop",
    RuleId.UNUSED_VARIABLE: "Unused variable",
    RuleId.DEBUG_OUTPUT: "Excessive debug output",
}

SUMMARY_TITLE = "### 🚀 Wasted Lines Detector Report"


def format_review_comment(finding: PositionedFinding) -> str:
    body = f"🔍 **{RULE_TITLES[finding.rule_id]}**: {finding.message}"
    if finding.fallback:
        body += f"\n\n_Reported for line {finding.line}, which is outside the diff._"
    return body


def review_comments(reports: Sequence[FileReport]) -> list[dict]:
    """Review comment payloads for every anchored finding, in report order."""
    return [
        finding.to_comment(format_review_comment(finding))
        for report in reports
        for finding in report.findings
        if finding.anchored
    ]


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def _blob_url(repository: Optional[str], ref: Optional[str], path: str) -> Optional[str]:
    if not repository or not ref:
        return None
    return f"https://github.com/{repository}/blob/{ref}/{path}"


def format_summary(
    reports: Sequence[FileReport],
    suggestions: Optional[Mapping[str, str]] = None,
    repository: Optional[str] = None,
    ref: Optional[str] = None,
) -> str:
    """
    The summary issue comment: a findings table per file, then remote suggestions.

    Returns an empty string when there is nothing to say.
    """
    suggestions = suggestions or {}
    sections: list[str] = []

    for report in reports:
        if not report.findings and not report.dropped:
            continue
        url = _blob_url(repository, ref, report.path)
        heading = f"📌 **[{report.path}]({url})**" if url else f"📌 **{report.path}**"
        section = heading
        if report.findings:
            rows = ["| Line | Check | Details |", "| ---: | --- | --- |"]
            for finding in report.findings:
                rows.append(f"| {finding.line} | {RULE_TITLES[finding.rule_id]} | {_cell(finding.message)} |")
            section += "\n\n" + "\n".join(rows)
        if report.dropped:
            section += f"\n\n_{report.dropped} finding(s) outside the changed lines were not posted._"
        sections.append(section)

    for path, text in suggestions.items():
        url = _blob_url(repository, ref, path)
        heading = f"📄 **[{path}]({url})**" if url else f"📄 **{path}**"
        sections.append(f"{heading}\n\n**Suggestion:**\n```\n{text}\n```")

    if not sections:
        return ""
    return SUMMARY_TITLE + "\n\n" + "\n\n".join(sections) + "\n"
