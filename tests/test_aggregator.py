"""Tests for grouping, deduplication and anchoring of findings."""

import logging

from detector.aggregator import FindingAggregator, aggregate
from detector.findings.models import FileFindings, Finding, RuleId

PATCH = "@@ -1,3 +1,4 @@\n context\n+added1\n+added2\n context"


def _finding(line: int, message: str = "msg", rule_id: RuleId = RuleId.UNUSED_VARIABLE) -> Finding:
    return Finding(line=line, message=message, rule_id=rule_id)


def test_findings_anchored_at_diff_positions():
    reports = aggregate([FileFindings(path="a.js", patch=PATCH, findings=[_finding(2), _finding(3, "other")])])
    assert len(reports) == 1
    assert [(f.line, f.position) for f in reports[0].findings] == [(2, 2), (3, 3)]
    assert reports[0].dropped == 0


def test_duplicates_removed_keeping_first():
    entry = FileFindings(
        path="a.js",
        patch=PATCH,
        findings=[_finding(2, "same"), _finding(2, "same", RuleId.DEBUG_OUTPUT), _finding(2, "different")],
    )
    report = aggregate([entry])[0]
    assert [(f.message, f.rule_id) for f in report.findings] == [
        ("same", RuleId.UNUSED_VARIABLE),
        ("different", RuleId.UNUSED_VARIABLE),
    ]


def test_files_grouped_in_first_seen_order():
    """Entries for the same path are merged; file order is the order paths first appear."""
    reports = aggregate(
        [
            FileFindings(path="b.py", patch=PATCH, findings=[_finding(1)]),
            FileFindings(path="a.js", patch=PATCH, findings=[_finding(2)]),
            FileFindings(path="b.py", findings=[_finding(4, "later")]),
        ]
    )
    assert [r.path for r in reports] == ["b.py", "a.js"]
    assert [f.line for f in reports[0].findings] == [1, 4]


def test_unresolvable_findings_dropped(caplog):
    caplog.set_level(logging.INFO, logger="detector.aggregator")
    reports = aggregate([FileFindings(path="a.js", patch=PATCH, findings=[_finding(2), _finding(40)])])
    assert [f.line for f in reports[0].findings] == [2]
    assert reports[0].dropped == 1
    assert any("outside the diff were dropped" in r.getMessage() for r in caplog.records)


def test_fallback_anchor_uses_first_position():
    aggregator = FindingAggregator(fallback_anchor=True)
    report = aggregator.aggregate([FileFindings(path="a.js", patch=PATCH, findings=[_finding(40)])])[0]
    assert report.dropped == 0
    assert report.findings[0].position == 1
    assert report.findings[0].fallback


def test_fallback_anchor_without_patch_still_drops():
    report = aggregate([FileFindings(path="a.js", patch="", findings=[_finding(1)])], fallback_anchor=True)[0]
    assert report.findings == []
    assert report.dropped == 1


def test_file_without_findings_gets_empty_report():
    reports = aggregate([FileFindings(path="clean.js", patch=PATCH)])
    assert reports[0].path == "clean.js"
    assert reports[0].findings == []
