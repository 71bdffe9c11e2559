from __future__ import annotations

"""
SyntaxAnalyzer and per-file dispatch.

SyntaxAnalyzer parses JavaScript with tree-sitter, lets FileContext build the
binding map, then walks the tree once in document order, handing each node to
every enabled SyntaxRule interested in its type. analyze_source() picks the
analyzers a SourceFile's language supports through the capability table.
"""

import logging
from typing import Optional

from tree_sitter import Parser

from detector.config import Config, get_default_config, get_enabled_rules
from detector.context import FileContext, create_context, walk
from detector.errors import ParseError
from detector.findings.models import Finding, SourceFile
from detector.languages import LanguageTag, capabilities_for
from detector.parser import create_parser
from detector.rules.base import SyntaxRule
from detector.rules.patterns import PatternRules

logger = logging.getLogger(__name__)


class SyntaxAnalyzer:
    """
    Tree-based checks for JavaScript.

    A single analyzer can be reused across files; the tree-sitter parser is
    created once and contexts are built per call.
    """

    def __init__(self, config: Optional[Config] = None, parser: Optional[Parser] = None) -> None:
        self.config = config if config is not None else get_default_config()
        self.parser = parser if parser is not None else create_parser()
        self.rules: list[SyntaxRule] = list(get_enabled_rules(self.config))

    def analyze(self, content: str, path: str = "<memory>.js") -> list[Finding]:
        """
        Return findings in document order.

        Raises:
            ParseError: content is not valid JavaScript.
        """
        context = create_context(SourceFile(path=path, content=content, language=LanguageTag.JAVASCRIPT), self.parser)
        return self.analyze_context(context)

    def analyze_context(self, context: FileContext) -> list[Finding]:
        # Per rule: (visit index, finding) so finalize() can filter per rule
        # and the merged output still follows the walk order.
        buckets: list[list[tuple[int, Finding]]] = [[] for _ in self.rules]
        for index, node in enumerate(walk(context.root_node)):
            for rule, bucket in zip(self.rules, buckets):
                if node.type in rule.node_types:
                    bucket.extend((index, f) for f in rule.check(node, context, self.config))

        ordered: list[tuple[int, int, Finding]] = []
        for rule_index, (rule, bucket) in enumerate(zip(self.rules, buckets)):
            kept = rule.finalize([f for _, f in bucket], context, self.config)
            keep_ids = {id(f) for f in kept}
            ordered.extend((index, rule_index, f) for index, f in bucket if id(f) in keep_ids)
        ordered.sort(key=lambda item: (item[0], item[1]))

        findings = [f for _, _, f in ordered]
        logger.debug("Syntax analysis of %s: %d finding(s)", context.path, len(findings))
        return findings


def analyze_source(
    source_file: SourceFile,
    config: Optional[Config] = None,
    syntax_analyzer: Optional[SyntaxAnalyzer] = None,
    parse_errors: Optional[list[ParseError]] = None,
) -> list[Finding]:
    """
    Run every analyzer the file's language supports and return the findings.

    Syntax findings come first, then pattern findings. A ParseError only
    costs the syntax findings; pattern rules still run on the raw text. When
    parse_errors is given, the ParseError is appended to it for the caller.
    """
    if config is None:
        config = get_default_config()
    capabilities = capabilities_for(source_file.language)
    findings: list[Finding] = []

    if capabilities.has_tree_grammar:
        analyzer = syntax_analyzer or SyntaxAnalyzer(config)
        try:
            findings.extend(analyzer.analyze(source_file.content, path=source_file.path))
        except ParseError as exc:
            logger.warning("Skipping syntax checks for %s: %s", source_file.path, exc)
            if parse_errors is not None:
                parse_errors.append(exc)

    findings.extend(PatternRules(config).detect(source_file.content, source_file.language))
    logger.info("Analyzed %s (%s): %d finding(s)", source_file.path, source_file.language, len(findings))
    return findings
