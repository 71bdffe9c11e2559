"""Unit tests for the boolean comparison and boolean literal rules."""

from detector.config import get_default_config
from detector.context import create_context
from detector.findings.models import RuleId, SourceFile
from detector.languages import LanguageTag
from detector.rules.boolean_checks import BooleanComparisonRule, RedundantBooleanLiteralRule


def _run_rule(rule, source: str) -> list:
    """Build context for source, run rule, return findings."""
    ctx = create_context(SourceFile(path="test.js", content=source, language=LanguageTag.JAVASCRIPT))
    return rule.run(ctx, get_default_config())


def test_strict_equality_with_true():
    """`if (x === true)` is reported at the if line."""
    findings = _run_rule(BooleanComparisonRule(), "if (x === true) { y(); }\n")
    assert len(findings) == 1
    assert findings[0].line == 1
    assert findings[0].rule_id == RuleId.BOOLEAN_COMPARISON
    assert findings[0].message == "Comparison 'x === true' can be simplified to 'x'."


def test_comparison_with_false_suggests_negation():
    findings = _run_rule(BooleanComparisonRule(), "\nif (done == false) {\n  retry();\n}\n")
    assert len(findings) == 1
    assert findings[0].line == 2
    assert "'!done'" in findings[0].message


def test_not_equal_false_is_the_value_itself():
    findings = _run_rule(BooleanComparisonRule(), "if (flag !== false) go();\n")
    assert len(findings) == 1
    assert findings[0].message.endswith("to 'flag'.")


def test_literal_on_the_left():
    findings = _run_rule(BooleanComparisonRule(), "if (true == ready) start();\n")
    assert len(findings) == 1
    assert "'ready'" in findings[0].message


def test_ternary_condition():
    findings = _run_rule(BooleanComparisonRule(), "const label = (isOn === true) ? 'on' : 'off';\nuse(label);\n")
    assert len(findings) == 1
    assert findings[0].line == 1


def test_regular_comparisons_are_ignored():
    """Comparisons between non-literal operands are fine."""
    source = """if (a === b) { x(); }
if (count > 0) { y(); }
if (isReady) { z(); }
const same = left == right ? 1 : 2;
"""
    assert _run_rule(BooleanComparisonRule(), source) == []


def test_comparison_outside_a_condition_is_ignored():
    assert _run_rule(BooleanComparisonRule(), "const isTrue = value === true;\nuse(isTrue);\n") == []


def test_redundant_true_condition():
    findings = _run_rule(RedundantBooleanLiteralRule(), "if (true) {\n  a();\n}\n")
    assert len(findings) == 1
    assert findings[0].rule_id == RuleId.REDUNDANT_BOOLEAN_LITERAL
    assert findings[0].message == "Condition is always true; remove the redundant check."


def test_redundant_false_in_ternary():
    findings = _run_rule(RedundantBooleanLiteralRule(), "const v = false ? 1 : 2;\nuse(v);\n")
    assert len(findings) == 1
    assert "always false" in findings[0].message


def test_while_true_is_not_reported():
    """Infinite loops are an idiom, not a redundant if."""
    assert _run_rule(RedundantBooleanLiteralRule(), "while (true) { tick(); }\n") == []
