from __future__ import annotations
"""Single-provider calls with a bounded retry budget.

``RetryPolicy`` owns the attempt loop and linear backoff and knows nothing
about HTTP.  ``ProviderCaller`` shapes one request and hands a single-attempt
coroutine to the policy.  Retry state never outlives one ``call``.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, Union

import httpx

from core.errors import TransportFailure
from core.logging import logger

from .credentials import CredentialResolver
from .shaper import ShapedRequest, shape_request
from .uploads import UploadedFile

__all__ = [
    "Success",
    "Failure",
    "AttemptOutcome",
    "RetryPolicy",
    "ProviderCaller",
    "decode_payload",
]


@dataclass(frozen=True)
class Success:
    """Provider answered; ``payload`` is the decoded body."""
    payload: Any


@dataclass(frozen=True)
class Failure:
    """Provider gave up after its last attempt."""
    error: Exception


AttemptOutcome = Union[Success, Failure]


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


class RetryPolicy:
    """Run an attempt function up to ``attempts`` times with linear backoff.

    After a failed attempt ``i`` (0-based) the policy sleeps
    ``backoff * (i + 1)`` seconds, except after the last one.
    """

    def __init__(
        self,
        attempts: int = 2,
        backoff: float = 0.2,
        retry_on: Tuple[Type[BaseException], ...] = (TransportFailure,),
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self.attempts = attempts
        self.backoff = backoff
        self._retry_on = retry_on
        self._sleep = sleep

    def delay(self, attempt: int) -> float:
        return self.backoff * (attempt + 1)

    async def run(self, attempt_fn: Callable[[int], Awaitable[Any]]) -> AttemptOutcome:
        last_error: Optional[Exception] = None
        for attempt in range(self.attempts):
            try:
                return Success(await attempt_fn(attempt))
            except self._retry_on as exc:
                last_error = exc
                logger.warning(f"[Provider attempt {attempt + 1}] {exc}", extra={"attempt": attempt + 1})
                if attempt == self.attempts - 1:
                    break
                await self._sleep(self.delay(attempt))
        return Failure(last_error)


# ---------------------------------------------------------------------------
# Provider caller
# ---------------------------------------------------------------------------


def decode_payload(response: httpx.Response) -> Any:
    """JSON body when it parses, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


class ProviderCaller:
    """Executes shaped requests against one provider at a time."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        credentials: CredentialResolver,
        retry: RetryPolicy,
        timeout: float = 7.0,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._retry = retry
        self._timeout = timeout

    async def call(
        self,
        provider_url: str,
        query: str,
        file: Optional[UploadedFile] = None,
    ) -> AttemptOutcome:
        request = shape_request(
            provider_url,
            query,
            file=file,
            credential=self._credentials.resolve(provider_url),
        )
        return await self._retry.run(lambda attempt: self._send(provider_url, request))

    async def _send(self, provider_url: str, request: ShapedRequest) -> Any:
        try:
            if request.file is not None:
                # fresh handle per attempt so a retry re-uploads every byte
                with request.file.open() as fh:
                    response = await self._client.request(
                        request.method,
                        request.url,
                        headers=request.headers,
                        data=request.data,
                        files={"image": (request.file.filename, fh)},
                        timeout=self._timeout,
                    )
            else:
                response = await self._client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    json=request.json,
                    timeout=self._timeout,
                )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            raise TransportFailure(provider_url, str(exc) or type(exc).__name__) from exc
        return decode_payload(response)
