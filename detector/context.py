# Per-file analysis context: path, source bytes, AST and the binding map, plus node helpers.
# Builds contexts from SourceFile objects and logs node/function counts once parsed.

import logging
from typing import Optional

from tree_sitter import Node as TSNode
from tree_sitter import Parser, Tree

from detector.findings.models import SourceFile
from detector.parser import create_parser, parse_bytes, walk
from detector.scopes import FUNCTION_SCOPE_TYPES, BindingMap, build_binding_map

logger = logging.getLogger(__name__)


def count_tree_stats(root: TSNode) -> tuple[int, int]:
    """
    Return (total node count, function count) for the tree.

    Useful for logging how much was parsed (nodes and functions).
    """
    nodes = 0
    functions = 0
    for node in walk(root):
        nodes += 1
        if node.type in FUNCTION_SCOPE_TYPES:
            functions += 1
    return nodes, functions


class FileContext:
    """
    Per-file state for syntax analysis: path, raw source bytes, AST and bindings.

    Rules use context.path, context.source, context.tree and context.bindings.
    Use get_source_span(context, node) and get_line(node) for text/locations.
    """

    def __init__(
        self,
        path: str,
        source: bytes,
        tree: Tree,
        bindings: Optional[BindingMap] = None,
    ) -> None:
        self.path = path
        self.source = source
        self.tree = tree
        self._bindings = bindings

    @property
    def root_node(self) -> TSNode:
        """Convenience access to the AST root."""
        return self.tree.root_node

    @property
    def bindings(self) -> BindingMap:
        """Scope-resolved bindings and their reference counts, built on first use."""
        if self._bindings is None:
            self._bindings = build_binding_map(self.root_node, self.source)
        return self._bindings


def get_source_span(context: FileContext, node: TSNode) -> str:
    """
    Return the substring of context.source for the given node's byte range.

    Decodes with errors="replace" so bad UTF-8 does not crash.
    """
    return context.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def get_line(node: TSNode) -> int:
    """1-based line of the node's start position (tree-sitter rows are 0-based)."""
    return node.start_point[0] + 1


def create_context(
    source_file: SourceFile,
    parser: Optional[Parser] = None,
) -> FileContext:
    """
    Parse a SourceFile into a FileContext with its binding map computed.

    Raises:
        ParseError: The content is not valid JavaScript.
    """
    if parser is None:
        parser = create_parser()

    source = source_file.content.encode("utf-8")
    tree = parse_bytes(source, parser=parser, path=source_file.path)
    bindings = build_binding_map(tree.root_node, source)

    node_count, func_count = count_tree_stats(tree.root_node)
    logger.info(
        "Parsed %s: %d nodes, %d function(s), %d binding(s)",
        source_file.path,
        node_count,
        func_count,
        len(bindings),
    )

    return FileContext(
        path=source_file.path,
        source=source,
        tree=tree,
        bindings=bindings,
    )
