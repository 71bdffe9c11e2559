"""Unit tests for the pydantic finding models."""

import pytest
from pydantic import ValidationError

from detector.findings.models import Finding, PositionedFinding, RuleId, SourceFile
from detector.languages import LanguageTag


def test_source_file_language_from_path():
    source = SourceFile.from_path("scripts/build.sh", "echo hi\n")
    assert source.language == LanguageTag.SHELL
    assert source.content == "echo hi\n"


def test_finding_line_must_be_positive():
    """Lines are 1-based; zero is rejected."""
    with pytest.raises(ValidationError):
        Finding(line=0, message="x", rule_id=RuleId.LONG_LOOP)


def test_finding_is_frozen():
    finding = Finding(line=3, message="x", rule_id=RuleId.LONG_LOOP)
    with pytest.raises(ValidationError):
        finding.line = 4


def test_rule_id_accepts_string_values():
    finding = Finding(line=1, message="x", rule_id="unused-variable")
    assert finding.rule_id is RuleId.UNUSED_VARIABLE
    assert str(finding.rule_id) == "unused-variable"


def test_positioned_finding_comment_payload():
    """to_comment() produces the dict shape of a review comment."""
    finding = PositionedFinding(
        path="src/app.js",
        line=7,
        message="Variable 'tmp' is declared but never used.",
        rule_id=RuleId.UNUSED_VARIABLE,
        position=4,
    )
    assert finding.anchored
    assert finding.to_comment() == {
        "path": "src/app.js",
        "position": 4,
        "body": "Variable 'tmp' is declared but never used.",
    }
    assert finding.to_comment("custom")["body"] == "custom"


def test_unanchored_positioned_finding():
    finding = PositionedFinding(path="a.py", line=2, message="m", rule_id=RuleId.EXCESSIVE_PRINT)
    assert finding.position is None
    assert not finding.anchored
    assert not finding.fallback
