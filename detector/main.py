from __future__ import annotations

"""
Typer CLI entry point.

Two commands:
- analyze: check local files or a directory and print a rich report. With
  --patch, findings are anchored against a `git diff` the way they would be
  on a pull request, and lines outside the diff are dropped (or fallback
  anchored with --fallback-anchor).
- action: the GitHub Action run. Reads the pull request from the Actions
  environment, analyzes every changed file and posts review comments plus a
  summary comment.

Configuration problems exit with code 2 before any analysis starts.
"""

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.logging import RichHandler

from detector.aggregator import FindingAggregator
from detector.analyzer import SyntaxAnalyzer, analyze_source
from detector.config import ActionSettings, Config, apply_overrides, get_default_config
from detector.diff import split_diff
from detector.errors import ConfigurationError, ExternalServiceError, ParseError
from detector.findings.models import FileFindings, FileReport, PositionedFinding, RuleId, SourceFile
from detector.github import GitHubClient
from detector.languages import is_supported_file
from detector.pipeline import ReviewPipeline
from detector.reporting.console import print_reports
from detector.suggestions import GeminiSuggestionProvider
from detector.traversal import find_source_files

logger = logging.getLogger(__name__)

app = typer.Typer(help="Wasted Lines Detector - find redundant code in changed files.")


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=debug)],
        force=True,
    )


def _collect_files(target: Path) -> List[Path]:
    """
    Resolve a target path into the files to analyze.

    - a supported file is returned as is
    - a directory is walked with traversal.find_source_files()
    """
    if target.is_file():
        if not is_supported_file(str(target)):
            raise typer.BadParameter(f"Unsupported file type: {target}")
        return [target]

    if target.is_dir():
        files = find_source_files(target)
        if not files:
            logger.warning("No supported source files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


def _display_path(path: Path) -> str:
    try:
        return path.relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


def _patch_for(path: str, patches: dict[str, str]) -> Optional[str]:
    """Patch whose repository path matches path or is a trailing part of it."""
    if path in patches:
        return patches[path]
    for patch_path, patch in patches.items():
        if path.endswith("/" + patch_path):
            return patch
    return None


def _unanchored_report(path: str, findings: Sequence) -> FileReport:
    return FileReport(
        path=path,
        findings=[
            PositionedFinding(path=path, line=f.line, message=f.message, rule_id=f.rule_id)
            for f in findings
        ],
    )


def _analyze_config(disable: Optional[List[str]], fallback_anchor: bool) -> Config:
    config = get_default_config()
    known = {rule_id.value for rule_id in RuleId}
    disabled = set(disable or [])
    unknown = sorted(disabled - known)
    if unknown:
        raise typer.BadParameter(f"Unknown rule id(s): {', '.join(unknown)}", param_hint="--disable")
    return replace(config, disabled_rules=frozenset(disabled), fallback_anchor=fallback_anchor)


@app.command()
def analyze(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Source file or directory to analyze.",
    ),
    patch: Optional[Path] = typer.Option(
        None,
        "--patch",
        exists=True,
        dir_okay=False,
        readable=True,
        help="`git diff` output; anchor findings at diff positions and drop lines outside it.",
    ),
    fallback_anchor: bool = typer.Option(
        False, "--fallback-anchor", help="Anchor findings outside the diff at position 1 instead of dropping them."
    ),
    disable: Optional[List[str]] = typer.Option(None, "--disable", help="Rule id to turn off; repeatable."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show rewrite hints and INFO logs."),
    debug: bool = typer.Option(False, "--debug", help="Show DEBUG logs."),
) -> None:
    """
    Analyze a single file or every supported file under a directory.
    """
    _configure_logging(verbose, debug)
    config = _analyze_config(disable, fallback_anchor)
    files = _collect_files(target)
    patches = split_diff(patch.read_text(encoding="utf-8", errors="replace")) if patch else None

    syntax_analyzer = SyntaxAnalyzer(config)
    collected: list[FileFindings] = []
    analyzed: list[str] = []

    for path in files:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.error("Cannot read file %s: %s", path, exc)
            continue
        display = _display_path(path)
        parse_errors: list[ParseError] = []
        findings = analyze_source(SourceFile.from_path(display, content), config, syntax_analyzer, parse_errors)
        analyzed.append(display)
        collected.append(
            FileFindings(
                path=display,
                patch=_patch_for(display, patches) if patches is not None else None,
                findings=findings,
            )
        )

    if patches is not None:
        reports = FindingAggregator(config.fallback_anchor).aggregate(collected)
    else:
        reports = [_unanchored_report(entry.path, entry.findings) for entry in collected]

    print_reports(reports, analyzed_files=[Path(p) for p in analyzed], verbose=verbose)


@app.command()
def action(
    verbose: bool = typer.Option(True, "--verbose/--quiet", help="INFO logs (default on in CI)."),
    debug: bool = typer.Option(False, "--debug", help="Show DEBUG logs."),
) -> None:
    """
    Review the pull request that triggered the GitHub Actions run.
    """
    _configure_logging(verbose, debug)
    try:
        settings = ActionSettings.from_env()
        config = apply_overrides(get_default_config(), os.environ)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)

    provider: Optional[GeminiSuggestionProvider] = None
    if settings.use_ai and settings.ai_api_key:
        provider = GeminiSuggestionProvider(
            settings.ai_api_key,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
        )

    try:
        with GitHubClient.from_settings(settings, config.request_timeout, config.max_retries) as client:
            try:
                paths = client.changed_paths()
            except ExternalServiceError as exc:
                logger.error("Cannot list files of PR #%d: %s", settings.pr_number, exc)
                raise typer.Exit(code=1)

            pipeline = ReviewPipeline(
                config,
                client,
                client,
                comment_sink=client,
                suggestion_provider=provider,
                repository=settings.repository,
            )
            result = pipeline.run(paths, settings.head_sha or settings.head_ref)
    finally:
        if provider is not None:
            provider.close()

    for diagnostic in result.diagnostics:
        logger.warning("%s", diagnostic)
    typer.echo(
        f"Analyzed {len(result.analyzed)} file(s): {result.finding_count} finding(s), "
        f"{len(result.diagnostics)} diagnostic(s)."
    )


def main() -> None:
    """Entry point for `python -m detector.main` and the wasted-lines script."""
    app()


if __name__ == "__main__":
    main()
