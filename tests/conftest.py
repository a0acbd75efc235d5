from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from gitlab_stats.failures import FailureLog
from gitlab_stats.gitlab.client import GitLabClient

API_URL = "https://gitlab.example.com/api/v4"


def make_client(handler, failures: FailureLog | None = None, **fetcher_options) -> GitLabClient:
    """GitLabClient backed by an httpx.MockTransport calling ``handler``."""
    fetcher_options.setdefault("sleep", AsyncMock())
    return GitLabClient(
        API_URL,
        "secret-token",
        failures if failures is not None else FailureLog(),
        transport=httpx.MockTransport(handler),
        **fetcher_options,
    )


@pytest.fixture
def failures() -> FailureLog:
    return FailureLog()
