"""Unit tests for the tree-sitter JavaScript parser wrapper."""

import logging

import pytest

from detector.errors import ParseError
from detector.parser import create_parser, get_javascript_language, parse_bytes, parse_text


def test_language_is_loaded():
    assert get_javascript_language() is not None


def test_parse_simple_program():
    """Valid JavaScript parses to a program root without errors."""
    tree = parse_bytes(b"const x = 1;\nfunction f() { return x; }\n")
    assert tree.root_node.type == "program"
    assert not tree.root_node.has_error


def test_parse_reuses_given_parser():
    parser = create_parser()
    first = parse_text("let a = 1;", parser=parser)
    second = parse_text("let b = 2;", parser=parser)
    assert first.root_node.type == "program"
    assert second.root_node.type == "program"


def test_parse_error_raises_with_line(caplog):
    """Broken syntax raises ParseError carrying the path and a line, and logs a warning."""
    caplog.set_level(logging.WARNING, logger="detector.parser")
    source = "const ok = 1;\nfunction (\n"
    with pytest.raises(ParseError) as excinfo:
        parse_text(source, path="src/broken.js")

    error = excinfo.value
    assert error.path == "src/broken.js"
    assert error.line is not None and error.line >= 1
    assert "Syntax error" in str(error)
    assert any("Parse completed with errors" in r.getMessage() for r in caplog.records)


def test_empty_source_parses():
    tree = parse_text("")
    assert tree.root_node.type == "program"


def test_parse_error_line_after_deep_expression():
    source = "const s = " + " + ".join(["1"] * 3000) + ";\nfunction (\n"
    with pytest.raises(ParseError) as excinfo:
        parse_text(source)
    assert excinfo.value.line is not None and excinfo.value.line >= 2
