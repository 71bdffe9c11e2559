# Interfaces of the services the review pipeline talks to; GitHubClient and
# GeminiSuggestionProvider are the production implementations.

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from detector.languages import LanguageTag


class FileFetcher(Protocol):
    def fetch_file(self, path: str, ref: str) -> str:
        """Text content of path at ref. Raises NotFound or RateLimited."""
        ...


class DiffFetcher(Protocol):
    def fetch_patch(self, path: str) -> str:
        """Unified diff patch of path in the pull request; empty for binary files."""
        ...


class CommentSink(Protocol):
    def post_review(self, comments: Sequence[dict], body: str = "") -> None:
        """Post {path, position, body} comments. Raises RateLimited or ValidationError."""
        ...

    def post_summary(self, body: str) -> None:
        ...


class RemoteSuggestionProvider(Protocol):
    def suggest(self, content: str, language: LanguageTag) -> Optional[str]:
        ...
