# Counting-loop detection: `for (let i = 0; ...; i++)` where an array method would do.

from __future__ import annotations

from typing import Any, Optional

from tree_sitter import Node as TSNode

from detector.context import FileContext, get_line, get_source_span
from detector.findings.models import Finding, RuleId
from detector.rules.base import SyntaxRule


def _counter_name(context: FileContext, node: TSNode, names: tuple[str, ...]) -> Optional[str]:
    """Name of the loop counter declared or assigned under node, if it is a conventional one."""
    if node.type == "variable_declarator":
        target = node.child_by_field_name("name")
    elif node.type == "assignment_expression":
        target = node.child_by_field_name("left")
    elif node.type in ("lexical_declaration", "variable_declaration", "expression_statement", "sequence_expression"):
        for child in node.named_children:
            found = _counter_name(context, child, names)
            if found:
                return found
        return None
    else:
        return None
    if target is not None and target.type == "identifier":
        name = get_source_span(context, target)
        if name in names:
            return name
    return None


class CounterLoopRule(SyntaxRule):
    """Flags index-driven for loops; forEach/map/reduce say the same with less code."""

    id = RuleId.COUNTER_LOOP
    name = "Counting loop"
    node_types = frozenset({"for_statement"})

    def check(self, node: TSNode, context: FileContext, config: Any) -> list[Finding]:
        initializer = node.child_by_field_name("initializer")
        if initializer is None:
            return []
        counter = _counter_name(context, initializer, tuple(config.counter_names))
        if counter is None:
            return []
        return [
            Finding(
                line=get_line(node),
                message=(
                    f"Loop over counter '{counter}' could be replaced by "
                    f"forEach(), map() or reduce()."
                ),
                rule_id=self.id,
            )
        ]
