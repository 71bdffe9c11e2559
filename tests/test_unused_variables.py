"""Unit tests for the unused variable rule."""

from detector.config import get_default_config
from detector.context import create_context
from detector.findings.models import RuleId, SourceFile
from detector.languages import LanguageTag
from detector.rules.unused_variables import UnusedVariableRule


def _run_rule(source: str) -> list:
    ctx = create_context(SourceFile(path="test.js", content=source, language=LanguageTag.JAVASCRIPT))
    return UnusedVariableRule().run(ctx, get_default_config())


def test_unused_const_reported():
    findings = _run_rule("const unused = compute();\n")
    assert len(findings) == 1
    assert findings[0].line == 1
    assert findings[0].rule_id == RuleId.UNUSED_VARIABLE
    assert findings[0].message == "Variable 'unused' is declared but never used."


def test_referenced_bindings_are_not_reported():
    """Every declared name below is read somewhere, so nothing is flagged."""
    source = """const base = 2;
let acc = 0;
var total = 0;
const { width, height } = size;
const [first] = list;
function area() {
  return width * height * base;
}
for (let k = 0; k < first; k++) {
  acc += area();
}
total = acc;
module.exports = { total };
"""
    assert _run_rule(source) == []


def test_shadowed_outer_variable_is_reported():
    source = """let value = 1;
function f() {
  let value = 2;
  return value;
}
f();
"""
    findings = _run_rule(source)
    assert len(findings) == 1
    assert findings[0].line == 1


def test_destructured_names_reported_individually():
    findings = _run_rule("const { used, spare } = opts;\nconsole.log(used);\n")
    assert [f.message for f in findings] == ["Variable 'spare' is declared but never used."]


def test_exports_params_and_functions_are_never_reported():
    source = """export const VERSION = '1.0';
export let counter = 0;
function handler(event, unusedParam) {
  return event;
}
class Unused {}
"""
    assert _run_rule(source) == []


def test_variable_used_in_closure():
    source = """const cache = new Map();
const get = (key) => cache.get(key);
export default get;
"""
    assert _run_rule(source) == []
