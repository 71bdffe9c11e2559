from __future__ import annotations

"""
Pull request review pipeline.

Processes changed files one by one: fetch content and patch, analyze, ask the
optional suggestion provider, then aggregate and post. Failures are contained
at file granularity: a file that cannot be fetched is skipped, a file that
cannot be parsed loses only its syntax findings, and a rejected comment post
is recorded. Every such failure becomes a Diagnostic on the RunResult.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from detector.aggregator import FindingAggregator
from detector.analyzer import SyntaxAnalyzer, analyze_source
from detector.collaborators import CommentSink, DiffFetcher, FileFetcher, RemoteSuggestionProvider
from detector.config import Config, get_default_config
from detector.errors import DetectorError, ExternalServiceError, ParseError, ValidationError
from detector.findings.models import FileFindings, FileReport, SourceFile
from detector.languages import capabilities_for, detect_language
from detector.reporting.comments import format_summary, review_comments

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem met during the run."""

    path: Optional[str]
    stage: str
    message: str

    def __str__(self) -> str:
        where = self.path or "<run>"
        return f"{where} [{self.stage}] {self.message}"


@dataclass
class RunResult:
    reports: list[FileReport] = field(default_factory=list)
    suggestions: dict[str, str] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    analyzed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def finding_count(self) -> int:
        return sum(len(report.findings) for report in self.reports)


class ReviewPipeline:
    def __init__(
        self,
        config: Optional[Config],
        file_fetcher: FileFetcher,
        diff_fetcher: DiffFetcher,
        comment_sink: Optional[CommentSink] = None,
        suggestion_provider: Optional[RemoteSuggestionProvider] = None,
        repository: Optional[str] = None,
    ) -> None:
        self.config = config if config is not None else get_default_config()
        self.file_fetcher = file_fetcher
        self.diff_fetcher = diff_fetcher
        self.comment_sink = comment_sink
        self.suggestion_provider = suggestion_provider
        self.repository = repository
        self._syntax_analyzer: Optional[SyntaxAnalyzer] = None

    @property
    def syntax_analyzer(self) -> SyntaxAnalyzer:
        if self._syntax_analyzer is None:
            self._syntax_analyzer = SyntaxAnalyzer(self.config)
        return self._syntax_analyzer

    def run(self, paths: Sequence[str], ref: str) -> RunResult:
        result = RunResult()
        collected: list[FileFindings] = []

        for path in paths:
            language = detect_language(path)
            if not capabilities_for(language).supported:
                logger.info("Skipping unsupported file: %s", path)
                result.skipped.append(path)
                continue
            entry = self._process_file(path, ref, result)
            if entry is not None:
                collected.append(entry)

        result.reports = FindingAggregator(self.config.fallback_anchor).aggregate(collected)
        logger.info(
            "Review complete: %d file(s) analyzed, %d finding(s), %d diagnostic(s)",
            len(result.analyzed),
            result.finding_count,
            len(result.diagnostics),
        )
        self._publish(result, ref)
        return result

    def _process_file(self, path: str, ref: str, result: RunResult) -> Optional[FileFindings]:
        logger.info("Checking file: %s", path)
        try:
            content = self.file_fetcher.fetch_file(path, ref)
            patch = self.diff_fetcher.fetch_patch(path)
        except ExternalServiceError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            result.diagnostics.append(Diagnostic(path, "fetch", str(exc)))
            result.skipped.append(path)
            return None

        if not content:
            logger.warning("Skipping %s due to empty content", path)
            result.skipped.append(path)
            return None

        source_file = SourceFile.from_path(path, content)
        parse_errors: list[ParseError] = []
        findings = analyze_source(source_file, self.config, self.syntax_analyzer, parse_errors)
        for error in parse_errors:
            result.diagnostics.append(Diagnostic(path, "parse", str(error)))
        result.analyzed.append(path)

        if self.suggestion_provider is not None:
            self._ask_for_suggestion(source_file, result)

        return FileFindings(path=path, patch=patch, findings=findings)

    def _ask_for_suggestion(self, source_file: SourceFile, result: RunResult) -> None:
        logger.info("Requesting remote suggestions for %s", source_file.path)
        try:
            suggestion = self.suggestion_provider.suggest(source_file.content, source_file.language)
        except DetectorError as exc:
            result.diagnostics.append(Diagnostic(source_file.path, "suggest", str(exc)))
            return
        if suggestion:
            result.suggestions[source_file.path] = suggestion

    def _publish(self, result: RunResult, ref: str) -> None:
        if self.comment_sink is None:
            return

        comments = review_comments(result.reports)
        if comments:
            self._post_review(comments, result)

        summary = format_summary(result.reports, result.suggestions, self.repository, ref)
        if not summary:
            logger.info("No issues detected")
            return
        try:
            self.comment_sink.post_summary(summary)
        except ExternalServiceError as exc:
            logger.error("Failed to create summary comment: %s", exc)
            result.diagnostics.append(Diagnostic(None, "post-summary", str(exc)))

    def _post_review(self, comments: list[dict], result: RunResult) -> None:
        """Post all comments as one review; if GitHub rejects it, post one review per file."""
        try:
            self.comment_sink.post_review(comments)
            return
        except ValidationError as exc:
            rejected = exc
        except ExternalServiceError as exc:
            logger.error("Failed to post review comments: %s", exc)
            result.diagnostics.append(Diagnostic(None, "post-review", str(exc)))
            return

        by_path: dict[str, list[dict]] = {}
        for comment in comments:
            by_path.setdefault(comment["path"], []).append(comment)
        if len(by_path) == 1:
            path = next(iter(by_path))
            logger.error("Failed to post review comments for %s: %s", path, rejected)
            result.diagnostics.append(Diagnostic(path, "post-review", str(rejected)))
            return

        logger.warning("Review rejected (%s); posting comments per file", rejected)
        for path, file_comments in by_path.items():
            try:
                self.comment_sink.post_review(file_comments)
            except ExternalServiceError as exc:
                logger.error("Failed to post review comments for %s: %s", path, exc)
                result.diagnostics.append(Diagnostic(path, "post-review", str(exc)))
