# Text pattern rules: regex heuristics over raw source, for every supported language.
#
# Structural rules (if/else, duplicate assignment, long loop) look at multi-line
# shapes; line heuristics are a data table of {pattern, language, message}
# rows applied to languages that have no tree grammar.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from detector.config import get_default_config
from detector.findings.models import Finding, RuleId
from detector.languages import LanguageTag, capabilities_for

logger = logging.getLogger(__name__)

BRACE_LANGUAGES = frozenset({LanguageTag.JAVASCRIPT, LanguageTag.GROOVY})

COMMENT_PREFIXES: dict[LanguageTag, tuple[str, ...]] = {
    LanguageTag.JAVASCRIPT: ("//", "/*", "*"),
    LanguageTag.GROOVY: ("//", "/*", "*"),
    LanguageTag.PYTHON: ("#",),
    LanguageTag.SHELL: ("#",),
    LanguageTag.RUBY: ("#",),
}

IF_ELSE_MESSAGE = "Unnecessary if-else block; consider using a ternary expression."


def line_of(content: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return content.count("\n", 0, offset) + 1


# --- unnecessary if/else ---------------------------------------------------

_BRACE_IF_ELSE = re.compile(
    r"\bif\s*\([^\n{};]*?\)\s*"
    r"\{\s*[^{};\s][^{};\n]*;?\s*\}\s*"
    r"else\s*"
    r"\{\s*[^{};\s][^{};\n]*;?\s*\}"
)

_INDENT_IF_ELSE = re.compile(
    r"^(?P<indent>[ \t]*)if\b[^\n]*:[ \t]*\n"
    r"(?P=indent)(?P<body>[ \t]+)\S[^\n]*\n"
    r"(?P=indent)else[ \t]*:[ \t]*\n"
    r"(?P=indent)(?P=body)\S[^\n]*(?:\n|$)"
    r"(?!(?P=indent)[ \t]+\S)",
    re.MULTILINE,
)

_KEYWORD_IF_ELSE = re.compile(
    r"^(?P<indent>[ \t]*)if\b[^\n]*\n"
    r"[ \t]*(?!else\b|elif\b|elsif\b|then\b)\S[^\n]*\n"
    r"(?P=indent)else[ \t]*\n"
    r"[ \t]*(?!fi\b|end\b)\S[^\n]*\n"
    r"(?P=indent)(?:fi|end)\b",
    re.MULTILINE,
)


def _if_else_pattern(language: LanguageTag) -> Optional[re.Pattern[str]]:
    if language in BRACE_LANGUAGES:
        return _BRACE_IF_ELSE
    if language == LanguageTag.PYTHON:
        return _INDENT_IF_ELSE
    if language in (LanguageTag.SHELL, LanguageTag.RUBY):
        return _KEYWORD_IF_ELSE
    return None


def find_unnecessary_if_else(content: str, language: LanguageTag, config: Any) -> list[Finding]:
    """One finding per if/else whose branches each hold a single statement."""
    pattern = _if_else_pattern(language)
    if pattern is None:
        return []
    findings: list[Finding] = []
    for match in pattern.finditer(content):
        start = match.start() if pattern is _BRACE_IF_ELSE else match.start() + len(match.group("indent"))
        # `else if (...) {..} else {..}` is the tail of a chain, not a standalone block
        if content[:start].rstrip().endswith("else"):
            continue
        findings.append(
            Finding(line=line_of(content, start), message=IF_ELSE_MESSAGE, rule_id=RuleId.UNNECESSARY_IF_ELSE)
        )
    return findings


# --- duplicate consecutive assignment --------------------------------------

_DECLARATION = r"(?:(?:let|const|var|def|local|final)[ \t]+)?"

_DUPLICATE_ASSIGNMENT = re.compile(
    r"^[ \t]*" + _DECLARATION + r"(?P<name>[A-Za-z_$][\w$]*)[ \t]*=(?![=>~])[^\n]*\n"
    r"(?=[ \t]*" + _DECLARATION + r"(?P=name)[ \t]*=(?![=>~])(?P<rhs>[^\n]*))",
    re.MULTILINE,
)


def find_duplicate_assignments(content: str, language: LanguageTag, config: Any) -> list[Finding]:
    """
    Two consecutive assignments to the same name where the second ignores the first.

    The first assignment is the wasted one, so that is where the finding goes.
    `x = 1` followed by `x = x + 1` reads the old value and is not reported.
    """
    findings: list[Finding] = []
    for match in _DUPLICATE_ASSIGNMENT.finditer(content):
        name = match.group("name")
        reads_previous = re.search(rf"(?<![\w$.]){re.escape(name)}(?![\w$])", match.group("rhs"))
        if reads_previous:
            continue
        findings.append(
            Finding(
                line=line_of(content, match.start()),
                message=f"Duplicate assignment to '{name}'; the value is overwritten on the next line.",
                rule_id=RuleId.DUPLICATE_ASSIGNMENT,
            )
        )
    return findings


# --- long loops -------------------------------------------------------------

_BRACE_LOOP = re.compile(r"\b(?:for|while)\s*\(|\bdo\s*\{")
_PY_LOOP = re.compile(r"^(?P<indent>[ \t]*)(?:async[ \t]+)?(?:for|while)\b[^\n]*:[ \t]*(?:#[^\n]*)?$")
_SHELL_LOOP = re.compile(r"^[ \t]*(?:for|while|until)\b")
_SHELL_DO = re.compile(r"(?:^|[;\s])do\b")
_SHELL_DONE = re.compile(r"(?:^|[;\s])done\b")
_RUBY_LOOP = re.compile(r"^[ \t]*(?:for|while|until)\b|\b(?:each\w*|times|loop|upto|downto|step|map)\b[^\n]*\bdo\b")
_RUBY_OPENER = re.compile(
    r"^[ \t]*(?:if|unless|while|until|for|def|class|module|begin|case)\b|\bdo\b(?:[ \t]*\|[^|]*\|)?[ \t]*$"
)
_RUBY_END = re.compile(r"^[ \t]*end\b")


def _skip_string(text: str, index: int) -> int:
    """Index just past the string literal starting at text[index]."""
    quote = text[index]
    i = index + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return i + 1
        i += 1
    return i


def match_bracket(text: str, open_index: int) -> Optional[int]:
    """Index of the bracket closing text[open_index], skipping string literals."""
    opener = text[open_index]
    closer = {"(": ")", "{": "}", "[": "]"}[opener]
    depth = 0
    i = open_index
    while i < len(text):
        ch = text[i]
        if ch in "\"'`":
            i = _skip_string(text, i)
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _brace_loops(content: str) -> Iterator[tuple[int, int]]:
    """(header line, body line count) for braced for/while/do loops."""
    for match in _BRACE_LOOP.finditer(content):
        brace = match.end() - 1
        if content[brace] == "(":
            close = match_bracket(content, brace)
            if close is None:
                continue
            brace = close + 1
            while brace < len(content) and content[brace] in " \t\r\n":
                brace += 1
            if brace >= len(content) or content[brace] != "{":
                continue
        end = match_bracket(content, brace)
        if end is None:
            continue
        body = line_of(content, end) - line_of(content, brace) - 1
        yield line_of(content, match.start()), body


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _python_loops(lines: list[str]) -> Iterator[tuple[int, int]]:
    for index, line in enumerate(lines):
        match = _PY_LOOP.match(line)
        if not match:
            continue
        indent = len(match.group("indent"))
        last_body = index
        for j in range(index + 1, len(lines)):
            if not lines[j].strip():
                continue
            if _indent_width(lines[j]) <= indent:
                break
            last_body = j
        yield index + 1, last_body - index


def _shell_loops(lines: list[str]) -> Iterator[tuple[int, int]]:
    for index, line in enumerate(lines):
        if not _SHELL_LOOP.match(line):
            continue
        do_line = next(
            (j for j in range(index, min(index + 3, len(lines))) if _SHELL_DO.search(lines[j])),
            None,
        )
        if do_line is None:
            continue
        depth = 0
        for j in range(do_line, len(lines)):
            depth += len(_SHELL_DO.findall(lines[j])) - len(_SHELL_DONE.findall(lines[j]))
            if depth <= 0:
                yield index + 1, j - do_line - 1
                break


def _ruby_loops(lines: list[str]) -> Iterator[tuple[int, int]]:
    for index, line in enumerate(lines):
        if not _RUBY_LOOP.search(line):
            continue
        depth = 0
        for j in range(index, len(lines)):
            if _RUBY_OPENER.search(lines[j]):
                depth += 1
            if _RUBY_END.match(lines[j]):
                depth -= 1
            if depth <= 0:
                yield index + 1, j - index - 1
                break


def find_long_loops(content: str, language: LanguageTag, config: Any) -> list[Finding]:
    """Loops whose body spans more than config.long_loop_lines physical lines."""
    limit = config.long_loop_lines
    if language in BRACE_LANGUAGES:
        loops = _brace_loops(content)
    elif language == LanguageTag.PYTHON:
        loops = _python_loops(content.splitlines())
    elif language == LanguageTag.SHELL:
        loops = _shell_loops(content.splitlines())
    elif language == LanguageTag.RUBY:
        loops = _ruby_loops(content.splitlines())
    else:
        return []
    return [
        Finding(
            line=line,
            message=f"Long loop: body spans {body} lines (more than {limit}); split it into smaller functions.",
            rule_id=RuleId.LONG_LOOP,
        )
        for line, body in loops
        if body > limit
    ]


# --- single-line heuristics -------------------------------------------------


@dataclass(frozen=True)
class LinePattern:
    """
    One row of the line heuristic table.

    threshold names a Config attribute: the row only reports once the file
    holds more matches than that value, and then reports every matching line.
    Rows without a threshold report every matching line.
    """

    rule_id: RuleId
    language: LanguageTag
    pattern: re.Pattern[str]
    message: str
    threshold: Optional[str] = None


def _row(rule_id: RuleId, language: LanguageTag, pattern: str, message: str, threshold: Optional[str] = None) -> LinePattern:
    return LinePattern(rule_id, language, re.compile(pattern), message, threshold)


_LOGGING = "Too many logging calls ({count} in this file); keep the ones that matter."
_PRINT = "Too many print statements ({count} in this file); remove them or use a logger."
_BOOLEAN = "Comparison with a boolean literal; use the condition directly."

LINE_PATTERNS: tuple[LinePattern, ...] = (
    _row(RuleId.EXCESSIVE_LOGGING, LanguageTag.PYTHON, r"\b(?:logging|logger|log)\.(?:debug|info)\s*\(", _LOGGING, "max_log_calls"),
    _row(RuleId.EXCESSIVE_LOGGING, LanguageTag.RUBY, r"\b(?:Rails\.)?logger\.(?:debug|info)\b", _LOGGING, "max_log_calls"),
    _row(RuleId.EXCESSIVE_LOGGING, LanguageTag.GROOVY, r"\b(?:log|logger)\.(?:debug|info)\s*\(", _LOGGING, "max_log_calls"),
    _row(RuleId.EXCESSIVE_LOGGING, LanguageTag.SHELL, r"(?<![\w./-])logger\s", _LOGGING, "max_log_calls"),
    _row(RuleId.EXCESSIVE_PRINT, LanguageTag.PYTHON, r"(?<![\w.])print\s*\(", _PRINT, "max_print_statements"),
    _row(RuleId.EXCESSIVE_PRINT, LanguageTag.SHELL, r"(?<![\w./$-])echo\b", _PRINT, "max_print_statements"),
    _row(RuleId.EXCESSIVE_PRINT, LanguageTag.RUBY, r"^[ \t]*(?:puts|print|p)\b(?![?!=])", _PRINT, "max_print_statements"),
    _row(RuleId.EXCESSIVE_PRINT, LanguageTag.GROOVY, r"(?<![\w.])println\b", _PRINT, "max_print_statements"),
    _row(RuleId.BOOLEAN_COMPARISON, LanguageTag.PYTHON, r"[=!]=\s*(?:True|False)\b", _BOOLEAN),
    _row(RuleId.BOOLEAN_COMPARISON, LanguageTag.RUBY, r"[=!]=\s*(?:true|false)\b", _BOOLEAN),
    _row(RuleId.BOOLEAN_COMPARISON, LanguageTag.GROOVY, r"[=!]=\s*(?:true|false)\b", _BOOLEAN),
    _row(RuleId.BOOLEAN_COMPARISON, LanguageTag.SHELL, r"(?:==|!=|\s=)\s*[\"']?(?:true|false)\b", _BOOLEAN),
)


def _is_comment(line: str, language: LanguageTag) -> bool:
    stripped = line.lstrip()
    return any(stripped.startswith(prefix) for prefix in COMMENT_PREFIXES.get(language, ()))


def apply_line_patterns(content: str, language: LanguageTag, config: Any) -> list[Finding]:
    """Run every LINE_PATTERNS row for language; rows are evaluated independently."""
    lines = content.splitlines()
    findings: list[Finding] = []
    for row in LINE_PATTERNS:
        if row.language != language or not config.is_enabled(row.rule_id):
            continue
        hits: list[int] = []
        count = 0
        for number, line in enumerate(lines, start=1):
            if _is_comment(line, language):
                continue
            matches = len(row.pattern.findall(line))
            if matches:
                count += matches
                hits.append(number)
        if not hits:
            continue
        if row.threshold is not None and count <= getattr(config, row.threshold):
            continue
        message = row.message.format(count=count)
        findings.extend(Finding(line=number, message=message, rule_id=row.rule_id) for number in hits)
    return findings


StructuralRule = Callable[[str, LanguageTag, Any], list[Finding]]

STRUCTURAL_RULES: tuple[tuple[RuleId, StructuralRule], ...] = (
    (RuleId.UNNECESSARY_IF_ELSE, find_unnecessary_if_else),
    (RuleId.DUPLICATE_ASSIGNMENT, find_duplicate_assignments),
    (RuleId.LONG_LOOP, find_long_loops),
)


class PatternRules:
    """
    The regex half of the detector.

    detect() never raises on odd input: a rule that cannot match yields
    nothing. Output is ordered by rule, then by line, so identical input
    always gives an identical list.
    """

    def __init__(self, config: Any = None) -> None:
        if config is None:
            config = get_default_config()
        self.config = config

    def detect(self, content: str, language: LanguageTag) -> list[Finding]:
        capabilities = capabilities_for(language)
        findings: list[Finding] = []
        if capabilities.structural_patterns:
            for rule_id, rule in STRUCTURAL_RULES:
                if self.config.is_enabled(rule_id):
                    findings.extend(rule(content, language, self.config))
        if capabilities.line_heuristics:
            findings.extend(apply_line_patterns(content, language, self.config))
        logger.debug("Pattern rules on %s content: %d finding(s)", language, len(findings))
        return findings


def detect(content: str, language: LanguageTag, config: Any = None) -> list[Finding]:
    """Shorthand for PatternRules(config).detect(content, language)."""
    return PatternRules(config).detect(content, language)
