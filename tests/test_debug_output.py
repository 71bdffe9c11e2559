"""Unit tests for the debug output rule."""

from dataclasses import replace

from detector.config import get_default_config
from detector.context import create_context
from detector.findings.models import RuleId, SourceFile
from detector.languages import LanguageTag
from detector.rules.debug_output import DebugOutputRule

SOURCE = """console.log("start");
console.error("kept");
console.debug("state", state);
logger.log("not console");
"""


def _run_rule(source: str, config=None) -> list:
    if config is None:
        config = get_default_config()
    ctx = create_context(SourceFile(path="test.js", content=source, language=LanguageTag.JAVASCRIPT))
    return DebugOutputRule().run(ctx, config)


def test_every_debug_call_reported_by_default():
    """With max_debug_calls=0, each console.log / console.debug is a finding."""
    findings = _run_rule(SOURCE)
    assert [f.line for f in findings] == [1, 3]
    assert all(f.rule_id == RuleId.DEBUG_OUTPUT for f in findings)
    assert "console.log()" in findings[0].message
    assert "console.debug()" in findings[1].message


def test_calls_within_allowance_not_reported():
    config = replace(get_default_config(), max_debug_calls=2)
    assert _run_rule(SOURCE, config) == []


def test_allowance_exceeded_reports_all_calls():
    config = replace(get_default_config(), max_debug_calls=1)
    assert len(_run_rule(SOURCE, config)) == 2


def test_sink_methods_are_configurable():
    config = replace(get_default_config(), debug_sink_methods=("error",))
    findings = _run_rule(SOURCE, config)
    assert [f.line for f in findings] == [2]


def test_no_console_calls():
    assert _run_rule("const x = 1;\nwindow.alert(x);\n") == []
