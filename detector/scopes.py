# Scope resolution for JavaScript syntax trees: declarations, scopes and reference counts.
# The map is computed once per file before any rule runs; rules only read it.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from tree_sitter import Node as TSNode

from detector.parser import walk

logger = logging.getLogger(__name__)

NodeKey = tuple[int, int, str]

FUNCTION_SCOPE_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

BLOCK_SCOPE_TYPES = frozenset(
    {
        "statement_block",
        "for_statement",
        "for_in_statement",
        "switch_body",
        "catch_clause",
        "class_static_block",
    }
)

SCOPE_TYPES = FUNCTION_SCOPE_TYPES | BLOCK_SCOPE_TYPES | {"program"}

REFERENCE_TYPES = frozenset(
    {
        "identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
    }
)

# Variable kinds the unused-variable check may report.
VARIABLE_KINDS = frozenset({"var", "let", "const"})


def node_key(node: TSNode) -> NodeKey:
    return (node.start_byte, node.end_byte, node.type)


@dataclass(frozen=True)
class Binding:
    """One declared name: where it lives and how it was introduced."""

    name: str
    kind: str
    line: int
    name_key: NodeKey
    scope_key: NodeKey
    exported: bool = False

    @property
    def is_variable(self) -> bool:
        return self.kind in VARIABLE_KINDS


class BindingMap:
    """
    Declarations per scope and the number of references resolved to each.

    Lookups are keyed by the declaring name node, so rules can go from a
    variable_declarator's name straight to its reference count.
    """

    def __init__(self) -> None:
        self._bindings: list[Binding] = []
        self._by_scope: dict[NodeKey, dict[str, list[int]]] = {}
        self._by_name_node: dict[NodeKey, int] = {}
        self._counts: list[int] = []
        self._excluded: set[NodeKey] = set()

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings)

    def declare(self, binding: Binding) -> None:
        index = len(self._bindings)
        self._bindings.append(binding)
        self._counts.append(0)
        self._by_scope.setdefault(binding.scope_key, {}).setdefault(binding.name, []).append(index)
        self._by_name_node[binding.name_key] = index

    def exclude(self, node: TSNode) -> None:
        """Mark an identifier that is neither a declaration nor a reference."""
        self._excluded.add(node_key(node))

    def is_declaration(self, node: TSNode) -> bool:
        key = node_key(node)
        return key in self._by_name_node or key in self._excluded

    def declares(self, scope_key: NodeKey, name: str) -> bool:
        return name in self._by_scope.get(scope_key, {})

    def add_reference(self, scope_key: NodeKey, name: str) -> None:
        for index in self._by_scope[scope_key][name]:
            self._counts[index] += 1

    def binding_for(self, name_node: TSNode) -> Optional[Binding]:
        index = self._by_name_node.get(node_key(name_node))
        return None if index is None else self._bindings[index]

    def reference_count(self, binding: Binding) -> int:
        return self._counts[self._by_name_node[binding.name_key]]

    def reference_counts(self) -> dict[str, int]:
        """name -> total references across every binding of that name."""
        totals: dict[str, int] = {}
        for binding, count in zip(self._bindings, self._counts):
            totals[binding.name] = totals.get(binding.name, 0) + count
        return totals

    def unreferenced(self) -> list[Binding]:
        return [b for b, count in zip(self._bindings, self._counts) if count == 0]


def _text(source: bytes, node: TSNode) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _enclosing(node: TSNode, types: frozenset[str]) -> TSNode:
    """Nearest strict ancestor whose type is in types; the root if none is."""
    current = node.parent
    last = node
    while current is not None:
        if current.type in types:
            return current
        last = current
        current = current.parent
    return last


def _block_scope(node: TSNode) -> TSNode:
    return _enclosing(node, BLOCK_SCOPE_TYPES | FUNCTION_SCOPE_TYPES | {"program"})


def _function_scope(node: TSNode) -> TSNode:
    return _enclosing(node, FUNCTION_SCOPE_TYPES | {"program"})


def pattern_names(pattern: Optional[TSNode]) -> list[TSNode]:
    """Name nodes bound by a declaration target, including destructuring patterns."""
    if pattern is None:
        return []
    if pattern.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [pattern]
    if pattern.type == "pair_pattern":
        return pattern_names(pattern.child_by_field_name("value"))
    if pattern.type in ("assignment_pattern", "object_assignment_pattern"):
        return pattern_names(pattern.child_by_field_name("left"))
    if pattern.type in ("object_pattern", "array_pattern", "rest_pattern"):
        names: list[TSNode] = []
        for child in pattern.named_children:
            names.extend(pattern_names(child))
        return names
    return []


def _declaration_kind(declaration: TSNode) -> str:
    if declaration.type == "variable_declaration":
        return "var"
    first = declaration.children[0] if declaration.child_count else None
    return first.type if first is not None else "let"


class _Collector:
    """Single pre-order pass that records every declaration into a BindingMap."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self.bindings = BindingMap()

    def _declare(self, name_node: TSNode, kind: str, scope: TSNode, exported: bool = False) -> None:
        self.bindings.declare(
            Binding(
                name=_text(self.source, name_node),
                kind=kind,
                line=name_node.start_point[0] + 1,
                name_key=node_key(name_node),
                scope_key=node_key(scope),
                exported=exported,
            )
        )

    def visit(self, node: TSNode) -> None:
        t = node.type
        if t == "variable_declarator":
            declaration = node.parent
            kind = _declaration_kind(declaration) if declaration is not None else "let"
            scope = _function_scope(node) if kind == "var" else _block_scope(node)
            exported = declaration is not None and declaration.parent is not None and (
                declaration.parent.type == "export_statement"
            )
            for name in pattern_names(node.child_by_field_name("name")):
                self._declare(name, kind, scope, exported)
        elif t in ("function_declaration", "generator_function_declaration", "class_declaration"):
            name = node.child_by_field_name("name")
            if name is not None:
                kind = "class" if t == "class_declaration" else "function"
                self._declare(name, kind, _block_scope(node))
        elif t in ("function_expression", "function", "generator_function", "class"):
            name = node.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                self._declare(name, "function", node)
        if t in FUNCTION_SCOPE_TYPES:
            params = node.child_by_field_name("parameters")
            targets = list(params.named_children) if params is not None else []
            single = node.child_by_field_name("parameter")
            if single is not None:
                targets.append(single)
            for target in targets:
                for name in pattern_names(target):
                    self._declare(name, "param", node)
        elif t == "catch_clause":
            for name in pattern_names(node.child_by_field_name("parameter")):
                self._declare(name, "catch", node)
        elif t == "for_in_statement":
            kind_node = node.child_by_field_name("kind")
            if kind_node is not None:
                kind = kind_node.type
                scope = _function_scope(node) if kind == "var" else node
                for name in pattern_names(node.child_by_field_name("left")):
                    self._declare(name, "loop", scope)
        elif t == "import_specifier":
            alias = node.child_by_field_name("alias") or node.child_by_field_name("name")
            if alias is not None and alias.type == "identifier":
                self._declare(alias, "import", _function_scope(node))
            name = node.child_by_field_name("name")
            if name is not None and alias is not None and node_key(name) != node_key(alias):
                # `import { a as b }`: `a` names the export, not a local reference
                self.bindings.exclude(name)
        elif t in ("import_clause", "namespace_import"):
            for child in node.named_children:
                if child.type == "identifier":
                    self._declare(child, "import", _function_scope(node))


def _resolve(bindings: BindingMap, node: TSNode, name: str) -> Optional[NodeKey]:
    """Innermost scope enclosing node that declares name."""
    current = node.parent
    while current is not None:
        if current.type in SCOPE_TYPES:
            key = node_key(current)
            if bindings.declares(key, name):
                return key
        current = current.parent
    return None


def build_binding_map(root: TSNode, source: bytes) -> BindingMap:
    """
    Collect declarations, then resolve every identifier reference to its binding.

    Two passes over the tree: declarations first (so hoisted and later
    declarations are known), then references. Identifiers that are themselves
    declaration names are not counted as references.
    """
    collector = _Collector(source)
    for node in walk(root):
        collector.visit(node)
    bindings = collector.bindings

    unresolved = 0
    for node in walk(root):
        if node.type not in REFERENCE_TYPES or bindings.is_declaration(node):
            continue
        name = _text(source, node)
        scope_key = _resolve(bindings, node, name)
        if scope_key is None:
            unresolved += 1
            continue
        bindings.add_reference(scope_key, name)

    logger.debug(
        "Binding map built: %d binding(s), %d unresolved reference(s)",
        len(bindings),
        unresolved,
    )
    return bindings
