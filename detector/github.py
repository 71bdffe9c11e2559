"""GitHub REST client: pull request files, file contents and review comments."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional, Sequence

import httpx

from detector.config import DEFAULT_API_URL, ActionSettings
from detector.errors import ExternalServiceError
from detector.http_retry import request_with_retry

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class GitHubClient:
    """
    GitHub API client for one pull request.

    Implements FileFetcher, DiffFetcher and CommentSink. The list of changed
    files (with their patches) is fetched once and cached.
    """

    def __init__(
        self,
        token: str,
        repository: str,
        pr_number: int,
        *,
        api_url: str = DEFAULT_API_URL,
        head_sha: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff: float = 1.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.repository = repository
        self.pr_number = pr_number
        self.head_sha = head_sha
        self.max_retries = max_retries
        self.backoff = backoff
        self._files: Optional[list[dict[str, Any]]] = None
        self.client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: ActionSettings, timeout: float = 30.0, max_retries: int = 2) -> "GitHubClient":
        return cls(
            settings.github_token,
            settings.repository,
            settings.pr_number,
            api_url=settings.api_url,
            head_sha=settings.head_sha,
            timeout=timeout,
            max_retries=max_retries,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.client.close()

    def close(self) -> None:
        self.client.close()

    def _request(self, method: str, url: str, what: str, **kwargs: Any) -> httpx.Response:
        return request_with_retry(
            self.client,
            method,
            url,
            what=what,
            max_retries=self.max_retries,
            backoff=self.backoff,
            **kwargs,
        )

    @property
    def _repo_url(self) -> str:
        return f"/repos/{self.repository}"

    def list_files(self) -> list[dict[str, Any]]:
        """Changed files of the pull request (filename, status, patch, ...), all pages."""
        if self._files is not None:
            return self._files
        files: list[dict[str, Any]] = []
        page = 1
        while True:
            response = self._request(
                "GET",
                f"{self._repo_url}/pulls/{self.pr_number}/files",
                what=f"list files of PR #{self.pr_number}",
                params={"per_page": PAGE_SIZE, "page": page},
            )
            batch = response.json()
            files.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            page += 1
        logger.info("PR #%d changes %d file(s)", self.pr_number, len(files))
        self._files = files
        return files

    def changed_paths(self) -> list[str]:
        """Paths of files still present after the pull request, in API order."""
        return [f["filename"] for f in self.list_files() if f.get("status") != "removed"]

    def fetch_patch(self, path: str) -> str:
        for entry in self.list_files():
            if entry.get("filename") == path:
                return entry.get("patch") or ""
        return ""

    def fetch_file(self, path: str, ref: str) -> str:
        response = self._request(
            "GET",
            f"{self._repo_url}/contents/{path}",
            what=f"fetch {path}@{ref}",
            params={"ref": ref},
        )
        try:
            data = response.json()
        except ValueError as exc:
            raise ExternalServiceError(f"fetch {path}@{ref}: unexpected response") from exc
        if not isinstance(data, dict):
            raise ExternalServiceError(f"fetch {path}@{ref}: unexpected response")
        if data.get("encoding") == "base64" and data.get("content"):
            try:
                return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError) as exc:
                raise ExternalServiceError(f"fetch {path}@{ref}: undecodable content") from exc
        download_url = data.get("download_url")
        if not download_url:
            raise ExternalServiceError(f"fetch {path}@{ref}: no content in response")
        # Files over 1 MB come back without inline content.
        raw = self._request("GET", download_url, what=f"download {path}@{ref}")
        return raw.text

    def post_review(self, comments: Sequence[dict], body: str = "") -> None:
        payload: dict[str, Any] = {"event": "COMMENT", "body": body, "comments": list(comments)}
        if self.head_sha:
            payload["commit_id"] = self.head_sha
        self._request(
            "POST",
            f"{self._repo_url}/pulls/{self.pr_number}/reviews",
            what=f"post review on PR #{self.pr_number}",
            json=payload,
        )
        logger.info("Posted review with %d comment(s) on PR #%d", len(payload["comments"]), self.pr_number)

    def post_summary(self, body: str) -> None:
        self._request(
            "POST",
            f"{self._repo_url}/issues/{self.pr_number}/comments",
            what=f"post summary on PR #{self.pr_number}",
            json={"body": body},
        )
        logger.info("Posted summary comment on PR #%d", self.pr_number)
