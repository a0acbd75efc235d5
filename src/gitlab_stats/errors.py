"""Exceptions raised by gitlab-stats."""

from __future__ import annotations


class GitLabStatsError(Exception):
    """Base exception for gitlab-stats errors."""


class ConfigError(GitLabStatsError):
    """Raised when the analysis configuration is incomplete or invalid."""


class FetchError(GitLabStatsError):
    """Raised when a request has exhausted its retry budget.

    ``recorded`` is true once the failure has been appended to the failure log.
    """

    def __init__(self, url: str, operation: str, message: str, *, recorded: bool = False):
        super().__init__(f"{operation} failed: {message}")
        self.url = url
        self.operation = operation
        self.message = message
        self.recorded = recorded


class PayloadError(FetchError):
    """Raised when a response body cannot be decoded into the expected shape."""
