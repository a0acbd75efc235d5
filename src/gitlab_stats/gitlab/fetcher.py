"""GET requests with a per-attempt timeout, constant-delay retry and failure recording."""

from __future__ import annotations

import asyncio
import enum
import json
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from ..errors import FetchError, PayloadError
from ..failures import FailureLog
from ..models import FailureRecord

DEFAULT_TIMEOUT = 5.0
DEFAULT_RETRIES = 20
DEFAULT_RETRY_DELAY = 0.3

_API_PREFIX_RE = re.compile(r"^.*?/v\d+(?=/|$)")


@dataclass(frozen=True)
class RequestContext:
    """Identifies a request in logs and failure records."""

    operation: str
    project_name: str | None = None
    author_email: str | None = None


class AttemptState(enum.Enum):
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(enum.Enum):
    TIMEOUT = "timeout"
    HTTP = "http"
    TRANSPORT = "transport"


@dataclass
class _AttemptFailure:
    kind: FailureKind
    message: str


def redact_url(url: str) -> str:
    """Strip the host and API version prefix from a request URL."""
    stripped = _API_PREFIX_RE.sub("", url, count=1)
    if stripped != url:
        return stripped
    parsed = httpx.URL(url)
    return parsed.raw_path.decode("ascii")


class ResilientFetcher:
    """Issues GET requests that survive timeouts, error statuses and transport errors.

    Every attempt races the request against ``timeout`` seconds. Failed
    attempts are retried after ``retry_delay`` seconds until ``retries``
    attempts have been made; the last failure is appended to
    ``failure_log`` and raised as :class:`FetchError`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        failure_log: FailureLog,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self._client = client
        self._token = token
        self._failure_log = failure_log
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    def _build_request(self, url: str, params: dict[str, Any] | None) -> httpx.Request:
        headers = {
            "PRIVATE-TOKEN": self._token,
            "Content-Type": "application/json",
        }
        return self._client.build_request("GET", url, params=params, headers=headers)

    async def _send(self, request: httpx.Request) -> httpx.Response | _AttemptFailure:
        try:
            response = await asyncio.wait_for(self._client.send(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            return _AttemptFailure(
                FailureKind.TIMEOUT, f"request timed out after {self.timeout:g}s"
            )
        except httpx.RequestError as e:
            return _AttemptFailure(
                FailureKind.TRANSPORT, f"network error: {type(e).__name__}: {e}"
            )
        if not response.is_success:
            return _AttemptFailure(
                FailureKind.HTTP,
                f"HTTP error! status: {response.status_code} {response.reason_phrase}",
            )
        return response

    async def _record_failure(self, url: str, context: RequestContext, message: str) -> None:
        await self._failure_log.add(
            FailureRecord(
                url=redact_url(url),
                project_name=context.project_name,
                author=context.author_email,
                operation=context.operation,
                error=message,
            )
        )

    async def fetch(
        self,
        url: str,
        context: RequestContext,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Fetch ``url`` and return its decoded JSON body."""
        attempt = 0
        state = AttemptState.ATTEMPTING
        request: httpx.Request | None = None
        outcome: httpx.Response | _AttemptFailure | None = None
        started = 0.0

        while True:
            if state is AttemptState.ATTEMPTING:
                attempt += 1
                request = self._build_request(url, params)
                started = time.monotonic()
                state = AttemptState.WAITING

            elif state is AttemptState.WAITING:
                outcome = await self._send(request)
                if isinstance(outcome, httpx.Response):
                    state = AttemptState.SUCCEEDED
                elif attempt >= self.retries:
                    state = AttemptState.FAILED
                else:
                    state = AttemptState.RETRYING

            elif state is AttemptState.RETRYING:
                elapsed_ms = (time.monotonic() - started) * 1000
                logger.warning(
                    "{} attempt {}/{} failed after {:.0f}ms, retrying: {}",
                    context.operation, attempt, self.retries, elapsed_ms, outcome.message,
                )
                await self._sleep(self.retry_delay)
                state = AttemptState.ATTEMPTING

            elif state is AttemptState.SUCCEEDED:
                try:
                    return outcome.json()
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    message = f"invalid JSON response: {e}"
                    await self._record_failure(str(request.url), context, message)
                    logger.error(
                        "{} failed: {} ({})", context.operation, message, redact_url(str(request.url))
                    )
                    raise PayloadError(
                        str(request.url), context.operation, message, recorded=True
                    ) from e

            else:
                elapsed_ms = (time.monotonic() - started) * 1000
                logger.error(
                    "{} failed after {} attempts ({:.0f}ms last attempt): {} ({})",
                    context.operation, attempt, elapsed_ms, outcome.message,
                    redact_url(str(request.url)),
                )
                await self._record_failure(str(request.url), context, outcome.message)
                raise FetchError(
                    str(request.url), context.operation, outcome.message, recorded=True
                )
