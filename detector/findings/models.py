# Pydantic data models for analysis results: SourceFile, Finding, PositionedFinding, FileReport.

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from detector.languages import LanguageTag, detect_language


class RuleId(str, Enum):
    """Identifiers for every check the detector can report."""

    UNNECESSARY_IF_ELSE = "unnecessary-if-else"
    DUPLICATE_ASSIGNMENT = "duplicate-assignment"
    LONG_LOOP = "long-loop"
    EXCESSIVE_LOGGING = "excessive-logging"
    EXCESSIVE_PRINT = "excessive-print"
    BOOLEAN_COMPARISON = "boolean-comparison"
    REDUNDANT_BOOLEAN_LITERAL = "redundant-boolean-literal"
    COUNTER_LOOP = "counter-loop"
    UNUSED_VARIABLE = "unused-variable"
    DEBUG_OUTPUT = "debug-output"

    def __str__(self) -> str:
        return self.value


class SourceFile(BaseModel):
    """A fetched file: repository path, text content and language tag."""

    path: str
    content: str
    language: LanguageTag

    model_config = {"frozen": True}

    @classmethod
    def from_path(cls, path: str, content: str) -> "SourceFile":
        """Build a SourceFile, deriving the language from the extension."""
        return cls(path=path, content=content, language=detect_language(path))


class Finding(BaseModel):
    """A single wasted-lines issue reported at a 1-based source line."""

    line: int = Field(..., ge=1, description="1-based line number in the new file")
    message: str
    rule_id: RuleId

    model_config = {"frozen": True}


class PositionedFinding(BaseModel):
    """
    A Finding resolved against the file's diff.

    position is GitHub's review-comment position, or None when the line is
    not part of the diff. fallback is True when position was substituted by
    the fallback anchor instead of being resolved from the line.
    """

    path: str
    line: int = Field(..., ge=1)
    message: str
    rule_id: RuleId
    position: Optional[int] = Field(None, ge=1)
    fallback: bool = False

    model_config = {"frozen": True}

    @property
    def anchored(self) -> bool:
        return self.position is not None

    def to_comment(self, body: Optional[str] = None) -> dict:
        """Payload entry for a pull request review comment."""
        return {
            "path": self.path,
            "position": self.position,
            "body": body if body is not None else self.message,
        }


class FileFindings(BaseModel):
    """Raw analyzer output for one file, paired with that file's diff patch."""

    path: str
    patch: Optional[str] = None
    findings: list[Finding] = Field(default_factory=list)


class FileReport(BaseModel):
    """Deduplicated, anchored findings for one file, in analyzer order."""

    path: str
    findings: list[PositionedFinding] = Field(default_factory=list)
    dropped: int = Field(0, ge=0, description="findings with no diff anchor")
