from __future__ import annotations

"""
Detector configuration: enabled syntax rules, thresholds and GitHub Action settings.

Thresholds that the various detector scripts used to hard-code (loop length,
how many prints or log calls are "too many", the loop counter name) all live
on Config with documented defaults. ActionSettings is the run-level
configuration read from the GitHub Actions environment; missing credentials
raise ConfigurationError before any analysis starts.
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Sequence

from detector.errors import ConfigurationError
from detector.rules.base import SyntaxRule
from detector.rules.boolean_checks import BooleanComparisonRule, RedundantBooleanLiteralRule
from detector.rules.counter_loops import CounterLoopRule
from detector.rules.debug_output import DebugOutputRule
from detector.rules.unused_variables import UnusedVariableRule

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


@dataclass
class Config:
    """
    Analysis configuration.

    rules: syntax rules the SyntaxAnalyzer runs for JavaScript.
    disabled_rules: rule ids to drop from both analyzers.
    long_loop_lines: a loop body longer than this many lines is reported.
    max_log_calls: logging calls allowed per file before each one is reported.
    max_print_statements: print/echo/puts/println allowed per file.
    max_debug_calls: console.<method> calls allowed per JavaScript file.
    counter_names: loop variables that mark a C-style counting loop.
    fallback_anchor: anchor unresolvable findings at diff position 1 instead of dropping them.
    """

    rules: Sequence[SyntaxRule] = field(default_factory=list)
    disabled_rules: frozenset[str] = frozenset()
    long_loop_lines: int = 10
    max_log_calls: int = 5
    max_print_statements: int = 1
    max_debug_calls: int = 0
    counter_names: tuple[str, ...] = ("i",)
    debug_sink_object: str = "console"
    debug_sink_methods: tuple[str, ...] = ("log", "debug")
    fallback_anchor: bool = False
    request_timeout: float = 30.0
    max_retries: int = 2

    def is_enabled(self, rule_id: str) -> bool:
        return str(rule_id) not in self.disabled_rules


def get_default_config() -> Config:
    """
    Return the default configuration with every syntax rule enabled.

    The CLI and the GitHub Action start from this and override thresholds
    from flags or action inputs.
    """
    rules: list[SyntaxRule] = [
        BooleanComparisonRule(),
        RedundantBooleanLiteralRule(),
        CounterLoopRule(),
        UnusedVariableRule(),
        DebugOutputRule(),
    ]
    return Config(rules=rules)


def get_enabled_rules(config: Config | None = None) -> Sequence[SyntaxRule]:
    """Return the syntax rules from config (or the default config) that are not disabled."""
    if config is None:
        config = get_default_config()
    return [rule for rule in config.rules if config.is_enabled(rule.id)]


def _input(env: Mapping[str, str], name: str) -> Optional[str]:
    """Read an action input the way the runner exposes it (INPUT_<NAME>)."""
    value = env.get(f"INPUT_{name.upper()}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _input(env, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Input '{name}' must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"Input '{name}' must not be negative, got {value}")
    return value


def apply_overrides(config: Config, env: Mapping[str, str]) -> Config:
    """Return a copy of config with threshold inputs from the action environment applied."""
    disabled = _input(env, "disabled_rules")
    return replace(
        config,
        long_loop_lines=_as_int(env, "long_loop_lines", config.long_loop_lines),
        max_log_calls=_as_int(env, "max_log_calls", config.max_log_calls),
        max_print_statements=_as_int(env, "max_print_statements", config.max_print_statements),
        max_debug_calls=_as_int(env, "max_debug_calls", config.max_debug_calls),
        fallback_anchor=_as_bool(_input(env, "fallback_anchor"), config.fallback_anchor),
        disabled_rules=(
            frozenset(r.strip() for r in disabled.split(",") if r.strip())
            if disabled
            else config.disabled_rules
        ),
    )


@dataclass(frozen=True)
class ActionSettings:
    """Everything a GitHub Action run needs besides the analysis thresholds."""

    github_token: str
    repository: str
    pr_number: int
    head_ref: str
    head_sha: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    ai_api_key: Optional[str] = None
    use_ai: bool = False

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ActionSettings":
        """
        Build settings from GITHUB_* variables, action inputs and the event payload.

        Raises:
            ConfigurationError: token, repository or pull request are missing,
                or AI review is enabled without an API key.
        """
        if env is None:
            env = os.environ

        token = env.get("GITHUB_TOKEN") or _input(env, "github_token")
        if not token:
            raise ConfigurationError("Missing GitHub token: set GITHUB_TOKEN or the github_token input")

        repository = env.get("GITHUB_REPOSITORY", "")
        if "/" not in repository:
            raise ConfigurationError(f"GITHUB_REPOSITORY must look like owner/repo, got {repository!r}")

        pull_request = _load_pull_request(env.get("GITHUB_EVENT_PATH"))
        if pull_request is None:
            raise ConfigurationError("No pull request found in the event payload")

        ai_api_key = env.get("AI_API_KEY") or _input(env, "ai_api_key")
        use_ai = _as_bool(_input(env, "use_ai"), default=False)
        if use_ai and not ai_api_key:
            raise ConfigurationError("AI review is enabled but AI_API_KEY / ai_api_key is not set")

        head = pull_request.get("head") or {}
        settings = cls(
            github_token=token,
            repository=repository,
            pr_number=int(pull_request["number"]),
            head_ref=head.get("ref") or env.get("GITHUB_HEAD_REF", ""),
            head_sha=head.get("sha"),
            api_url=env.get("GITHUB_API_URL", DEFAULT_API_URL),
            ai_api_key=ai_api_key,
            use_ai=use_ai,
        )
        logger.info(
            "Action settings: repository=%s pr=#%d ref=%s use_ai=%s",
            settings.repository,
            settings.pr_number,
            settings.head_ref,
            settings.use_ai,
        )
        return settings


def _load_pull_request(event_path: Optional[str]) -> Optional[dict]:
    """Return the pull_request object of the triggering event, or None."""
    if not event_path:
        return None
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Cannot read event payload {event_path}: {exc}") from exc
    pull_request = payload.get("pull_request")
    if not isinstance(pull_request, dict) or "number" not in pull_request:
        return None
    return pull_request
