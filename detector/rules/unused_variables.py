# Unused variable detection: let/const/var bindings with no reference in their scope.

from __future__ import annotations

from typing import Any

from tree_sitter import Node as TSNode

from detector.context import FileContext, get_line
from detector.findings.models import Finding, RuleId
from detector.rules.base import SyntaxRule
from detector.scopes import pattern_names


class UnusedVariableRule(SyntaxRule):
    """
    Reports declared variables that nothing reads or writes.

    Relies on context.bindings, which resolves each identifier to the
    innermost scope declaring it, so a shadowed outer variable is not
    considered used by references to the inner one.
    """

    id = RuleId.UNUSED_VARIABLE
    name = "Unused variable"
    node_types = frozenset({"variable_declarator"})

    def check(self, node: TSNode, context: FileContext, config: Any) -> list[Finding]:
        findings: list[Finding] = []
        bindings = context.bindings
        for name_node in pattern_names(node.child_by_field_name("name")):
            binding = bindings.binding_for(name_node)
            if binding is None or not binding.is_variable or binding.exported:
                continue
            if bindings.reference_count(binding) > 0:
                continue
            findings.append(
                Finding(
                    line=get_line(name_node),
                    message=f"Variable '{binding.name}' is declared but never used.",
                    rule_id=self.id,
                )
            )
        return findings
