# Error taxonomy: which failures degrade a single file and which abort the run.

from __future__ import annotations

from typing import Optional


class DetectorError(Exception):
    """Base class for all errors raised by the detector."""


class ParseError(DetectorError):
    """Source text could not be parsed into a syntax tree."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.path = path
        self.line = line


class UnresolvablePosition(DetectorError):
    """A source line has no anchor in the file's diff patch."""

    def __init__(self, line: int, path: Optional[str] = None) -> None:
        where = f" in {path}" if path else ""
        super().__init__(f"Line {line}{where} is not part of the diff")
        self.line = line
        self.path = path


class ConfigurationError(DetectorError):
    """Required credentials or pull request context are missing. Fatal."""


class ExternalServiceError(DetectorError):
    """A call to GitHub or the suggestion API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFound(ExternalServiceError):
    """The requested file or resource does not exist at the given ref."""


class RateLimited(ExternalServiceError):
    """The service rejected the call with a rate limit (HTTP 429/403)."""


class ValidationError(ExternalServiceError):
    """The service rejected the payload, e.g. a comment anchored outside the diff."""
