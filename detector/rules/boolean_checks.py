# Boolean condition checks: comparisons against true/false and conditions that are a bare literal.

from __future__ import annotations

from typing import Any, Optional

from tree_sitter import Node as TSNode

from detector.context import FileContext, get_line, get_source_span
from detector.findings.models import Finding, RuleId
from detector.rules.base import SyntaxRule

CONDITIONAL_TYPES = frozenset({"if_statement", "ternary_expression"})
EQUALITY_OPERATORS = frozenset({"===", "==", "!==", "!="})
BOOLEAN_LITERALS = frozenset({"true", "false"})


def condition_of(node: TSNode) -> Optional[TSNode]:
    """The test expression of an if/ternary with any parentheses stripped."""
    test = node.child_by_field_name("condition")
    while test is not None and test.type == "parenthesized_expression":
        inner = test.named_children
        test = inner[0] if inner else None
    return test


class BooleanComparisonRule(SyntaxRule):
    """
    `if (x === true)` and friends: the comparison adds nothing over `x` / `!x`.

    Fires only when one operand is a `true`/`false` literal; `a === b` between
    arbitrary values is a real test and is not flagged. Loose `==`/`!=` count too.
    """

    id = RuleId.BOOLEAN_COMPARISON
    name = "Simplifiable boolean comparison"
    node_types = CONDITIONAL_TYPES

    def check(self, node: TSNode, context: FileContext, config: Any) -> list[Finding]:
        test = condition_of(node)
        if test is None or test.type != "binary_expression":
            return []
        operator = test.child_by_field_name("operator")
        if operator is None or operator.type not in EQUALITY_OPERATORS:
            return []
        left = test.child_by_field_name("left")
        right = test.child_by_field_name("right")
        if right is not None and right.type in BOOLEAN_LITERALS:
            literal, operand = right, left
        elif left is not None and left.type in BOOLEAN_LITERALS:
            literal, operand = left, right
        else:
            return []

        negated = (literal.type == "false") != operator.type.startswith("!")
        subject = get_source_span(context, operand) if operand is not None else "the value"
        simplified = f"!{subject}" if negated else subject
        return [
            Finding(
                line=get_line(node),
                message=(
                    f"Comparison '{get_source_span(context, test)}' can be simplified "
                    f"to '{simplified}'."
                ),
                rule_id=self.id,
            )
        ]


class RedundantBooleanLiteralRule(SyntaxRule):
    """`if (true)` / `false ? a : b`: the branch taken never changes."""

    id = RuleId.REDUNDANT_BOOLEAN_LITERAL
    name = "Redundant boolean literal condition"
    node_types = CONDITIONAL_TYPES

    def check(self, node: TSNode, context: FileContext, config: Any) -> list[Finding]:
        test = condition_of(node)
        if test is None or test.type not in BOOLEAN_LITERALS:
            return []
        return [
            Finding(
                line=get_line(node),
                message=f"Condition is always {test.type}; remove the redundant check.",
                rule_id=self.id,
            )
        ]
