"""Tests for review comment and summary markdown."""

from detector.findings.models import FileReport, PositionedFinding, RuleId
from detector.reporting.comments import (
    SUMMARY_TITLE,
    format_review_comment,
    format_summary,
    review_comments,
)


def _positioned(line: int, position, message: str = "Variable 'x' is declared but never used.", fallback=False):
    return PositionedFinding(
        path="src/app.js",
        line=line,
        message=message,
        rule_id=RuleId.UNUSED_VARIABLE,
        position=position,
        fallback=fallback,
    )


def test_review_comment_body():
    body = format_review_comment(_positioned(3, 2))
    assert body == "🔍 **Unused variable**: Variable 'x' is declared but never used."


def test_fallback_comment_mentions_real_line():
    body = format_review_comment(_positioned(30, 1, fallback=True))
    assert "line 30" in body
    assert "outside the diff" in body


def test_review_comments_skip_unanchored():
    report = FileReport(path="src/app.js", findings=[_positioned(3, 2), _positioned(9, None)])
    comments = review_comments([report])
    assert len(comments) == 1
    assert comments[0]["path"] == "src/app.js"
    assert comments[0]["position"] == 2
    assert comments[0]["body"].startswith("🔍")


def test_summary_empty_when_nothing_to_report():
    assert format_summary([FileReport(path="a.js")]) == ""
    assert format_summary([]) == ""


def test_summary_table_with_links():
    report = FileReport(path="src/app.js", findings=[_positioned(3, 2, message="a | b")], dropped=2)
    summary = format_summary([report], repository="octo/repo", ref="feature")

    assert summary.startswith(SUMMARY_TITLE)
    assert "[src/app.js](https://github.com/octo/repo/blob/feature/src/app.js)" in summary
    assert "| 3 | Unused variable | a \\| b |" in summary
    assert "2 finding(s) outside the changed lines were not posted" in summary


def test_summary_omits_table_when_every_finding_was_dropped():
    summary = format_summary([FileReport(path="src/app.js", dropped=3)])
    assert "📌 **src/app.js**" in summary
    assert "3 finding(s) outside the changed lines were not posted" in summary
    assert "| Line |" not in summary


def test_summary_without_repository_has_plain_heading():
    report = FileReport(path="src/app.js", findings=[_positioned(3, 2)])
    summary = format_summary([report])
    assert "📌 **src/app.js**" in summary
    assert "https://" not in summary


def test_summary_includes_suggestions():
    summary = format_summary([], suggestions={"tool.py": "Use a loop."}, repository="octo/repo", ref="main")
    assert "**Suggestion:**" in summary
    assert "```\nUse a loop.\n```" in summary
    assert "[tool.py](https://github.com/octo/repo/blob/main/tool.py)" in summary
