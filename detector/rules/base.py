# Rule interfaces: the contract syntax rules implement and the SyntaxAnalyzer drives.
# Concrete rules (boolean_checks, counter_loops, ...) subclass SyntaxRule and implement check().

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from tree_sitter import Node as TSNode

from detector.context import FileContext, walk
from detector.findings.models import Finding, RuleId


class Rule(ABC):
    """
    Abstract base class for all analysis rules.

    Subclasses must define:
    - id: RuleId - identifier reported on every finding
    - name: str - human-readable rule name
    - run(context, config) -> list[Finding] - analyze one file and return findings
    """

    id: RuleId
    name: str

    @abstractmethod
    def run(self, context: FileContext, config: Any) -> list[Finding]:
        """
        Analyze one file and return any findings.

        Args:
            context: Per-file state (path, source bytes, AST tree, bindings).
            config: Detector Config (thresholds, sink names, ...).

        Returns:
            Findings in document order; empty if no issues.
        """
        ...


class SyntaxRule(Rule):
    """
    A rule evaluated node by node during one shared tree walk.

    node_types limits which nodes check() is called for. finalize() sees all
    of the rule's findings for the file once the walk is over, for rules whose
    verdict depends on a per-file count.
    """

    node_types: frozenset[str] = frozenset()

    @abstractmethod
    def check(self, node: TSNode, context: FileContext, config: Any) -> list[Finding]:
        ...

    def finalize(self, findings: list[Finding], context: FileContext, config: Any) -> list[Finding]:
        return findings

    def run(self, context: FileContext, config: Any) -> list[Finding]:
        findings: list[Finding] = []
        for node in walk(context.root_node):
            if node.type in self.node_types:
                findings.extend(self.check(node, context, config))
        return self.finalize(findings, context, config)
