# Debug output detection: console.log-style calls left in the code.

from __future__ import annotations

from typing import Any, Optional

from tree_sitter import Node as TSNode

from detector.context import FileContext, get_line, get_source_span
from detector.findings.models import Finding, RuleId
from detector.rules.base import SyntaxRule


def _sink_method(context: FileContext, call: TSNode, sink_object: str) -> Optional[str]:
    """For `<sink_object>.<method>(...)` return method, otherwise None."""
    function = call.child_by_field_name("function")
    if function is None or function.type != "member_expression":
        return None
    obj = function.child_by_field_name("object")
    prop = function.child_by_field_name("property")
    if obj is None or prop is None or obj.type != "identifier":
        return None
    if get_source_span(context, obj) != sink_object:
        return None
    return get_source_span(context, prop)


class DebugOutputRule(SyntaxRule):
    """
    Flags console.log / console.debug calls.

    Every call is reported once the file holds more than config.max_debug_calls
    of them; the default of 0 reports each one.
    """

    id = RuleId.DEBUG_OUTPUT
    name = "Excessive debug output"
    node_types = frozenset({"call_expression"})

    def check(self, node: TSNode, context: FileContext, config: Any) -> list[Finding]:
        method = _sink_method(context, node, config.debug_sink_object)
        if method is None or method not in config.debug_sink_methods:
            return []
        return [
            Finding(
                line=get_line(node),
                message=(
                    f"Debug output via {config.debug_sink_object}.{method}(); "
                    f"remove it or use a proper logger."
                ),
                rule_id=self.id,
            )
        ]

    def finalize(self, findings: list[Finding], context: FileContext, config: Any) -> list[Finding]:
        if len(findings) <= config.max_debug_calls:
            return []
        return findings
