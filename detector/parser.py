# Tree-sitter setup and AST parsing: parse JavaScript source into syntax trees.

import logging
from typing import Iterator, Optional

import tree_sitter
from tree_sitter import Language
from tree_sitter import Node as TSNode
from tree_sitter_javascript import language as _js_language_capsule

from detector.errors import ParseError

logger = logging.getLogger(__name__)

# JavaScript grammar: wrap tree-sitter-javascript capsule for use with tree_sitter.Parser
_JS_LANGUAGE = Language(_js_language_capsule())


def get_javascript_language() -> Language:
    """Return the Tree-sitter Language object for JavaScript."""
    return _JS_LANGUAGE


def create_parser() -> tree_sitter.Parser:
    """Create and return a Tree-sitter Parser configured for JavaScript."""
    return tree_sitter.Parser(_JS_LANGUAGE)


def walk(node: TSNode) -> Iterator[TSNode]:
    """Yield node and every descendant in document order (pre-order DFS)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _first_error_line(node: TSNode) -> Optional[int]:
    """1-based line of the first ERROR or MISSING node in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1
        stack.extend(reversed([c for c in current.children if c.has_error or c.is_missing]))
    return None


def parse_bytes(
    source: bytes,
    parser: Optional[tree_sitter.Parser] = None,
    path: Optional[str] = None,
) -> tree_sitter.Tree:
    """
    Parse JavaScript source bytes into an AST.

    Args:
        source: UTF-8 encoded JavaScript source code.
        parser: Optional parser instance; if None, a new one is created.
        path: Repository path, only used in log and error messages.

    Returns:
        The parse tree.

    Raises:
        ParseError: The tree contains ERROR or MISSING nodes.
    """
    if parser is None:
        parser = create_parser()
    tree = parser.parse(source)
    if tree.root_node.has_error:
        line = _first_error_line(tree.root_node)
        logger.warning(
            "Parse completed with errors: path=%s first_error_line=%s",
            path or "<memory>",
            line,
        )
        raise ParseError(
            f"Syntax error near line {line}" if line else "Syntax error",
            path=path,
            line=line,
        )
    logger.debug("Parse succeeded: path=%s root=%s", path or "<memory>", tree.root_node.type)
    return tree


def parse_text(
    content: str,
    parser: Optional[tree_sitter.Parser] = None,
    path: Optional[str] = None,
) -> tree_sitter.Tree:
    """Encode text as UTF-8 and parse it; see parse_bytes."""
    return parse_bytes(content.encode("utf-8"), parser=parser, path=path)
