# Language tags and the capability table that decides which analyzers run per file.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath


class LanguageTag(str, Enum):
    """Languages the detector knows how to look at."""

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    SHELL = "shell"
    RUBY = "ruby"
    GROOVY = "groovy"
    UNSUPPORTED = "unsupported"

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


@dataclass(frozen=True)
class LanguageCapabilities:
    """
    What the analysis pipeline may do for one language.

    has_tree_grammar: a tree-sitter grammar exists and SyntaxAnalyzer runs.
    structural_patterns: multi-line regex rules (if/else, duplicate assignment, long loop).
    line_heuristics: single-line regex rules (print/log counts, `== true`).
    """

    has_tree_grammar: bool
    structural_patterns: bool
    line_heuristics: bool

    @property
    def supported(self) -> bool:
        return self.has_tree_grammar or self.structural_patterns or self.line_heuristics


EXTENSION_MAP: dict[str, LanguageTag] = {
    ".js": LanguageTag.JAVASCRIPT,
    ".mjs": LanguageTag.JAVASCRIPT,
    ".cjs": LanguageTag.JAVASCRIPT,
    ".py": LanguageTag.PYTHON,
    ".sh": LanguageTag.SHELL,
    ".bash": LanguageTag.SHELL,
    ".rb": LanguageTag.RUBY,
    ".groovy": LanguageTag.GROOVY,
    ".gradle": LanguageTag.GROOVY,
}

DISPLAY_NAMES: dict[LanguageTag, str] = {
    LanguageTag.JAVASCRIPT: "JavaScript",
    LanguageTag.PYTHON: "Python",
    LanguageTag.SHELL: "Shell",
    LanguageTag.RUBY: "Ruby",
    LanguageTag.GROOVY: "Groovy",
    LanguageTag.UNSUPPORTED: "Unknown",
}

CAPABILITIES: dict[LanguageTag, LanguageCapabilities] = {
    LanguageTag.JAVASCRIPT: LanguageCapabilities(
        has_tree_grammar=True, structural_patterns=True, line_heuristics=False
    ),
    LanguageTag.PYTHON: LanguageCapabilities(
        has_tree_grammar=False, structural_patterns=True, line_heuristics=True
    ),
    LanguageTag.SHELL: LanguageCapabilities(
        has_tree_grammar=False, structural_patterns=True, line_heuristics=True
    ),
    LanguageTag.RUBY: LanguageCapabilities(
        has_tree_grammar=False, structural_patterns=True, line_heuristics=True
    ),
    LanguageTag.GROOVY: LanguageCapabilities(
        has_tree_grammar=False, structural_patterns=True, line_heuristics=True
    ),
    LanguageTag.UNSUPPORTED: LanguageCapabilities(
        has_tree_grammar=False, structural_patterns=False, line_heuristics=False
    ),
}


def detect_language(path: str) -> LanguageTag:
    """
    Map a repository path to its LanguageTag by file extension.

    Matching is case-insensitive; anything not in EXTENSION_MAP is UNSUPPORTED.

    Examples:
        >>> detect_language("src/app.js")
        <LanguageTag.JAVASCRIPT: 'javascript'>
        >>> detect_language("README.md")
        <LanguageTag.UNSUPPORTED: 'unsupported'>
    """
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return EXTENSION_MAP.get(suffix, LanguageTag.UNSUPPORTED)


def capabilities_for(language: LanguageTag) -> LanguageCapabilities:
    return CAPABILITIES[language]


def is_supported_file(path: str) -> bool:
    """True if at least one analyzer can run on this path."""
    return capabilities_for(detect_language(path)).supported
