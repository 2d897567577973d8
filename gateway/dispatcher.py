from __future__ import annotations
"""Ordered fallback across providers.

Providers are tried strictly in list order, one at a time.  The first one
whose payload normalizes to a non-empty answer wins and nothing after it is
called.  Per-provider failures are logged and collected, never raised
individually.
"""

from typing import Any, Callable, List, Optional, Protocol, Sequence

from core.errors import AllProvidersFailed, NoProvidersConfigured, ProviderFailure
from core.logging import logger

from .caller import AttemptOutcome, Failure
from .normalizer import normalize_answer
from .uploads import UploadedFile

__all__ = ["FallbackDispatcher"]


class _Caller(Protocol):
    async def call(
        self, provider_url: str, query: str, file: Optional[UploadedFile] = None
    ) -> AttemptOutcome: ...


class FallbackDispatcher:
    """Strict-priority fallback over a provider list."""

    def __init__(
        self,
        caller: _Caller,
        normalize: Callable[[Any], Optional[str]] = normalize_answer,
    ) -> None:
        self._caller = caller
        self._normalize = normalize

    async def dispatch(
        self,
        providers: Sequence[str],
        query: str,
        file: Optional[UploadedFile] = None,
    ) -> str:
        if not providers:
            raise NoProvidersConfigured("No providers configured.")

        failures: List[ProviderFailure] = []
        for provider_url in providers:
            outcome = await self._caller.call(provider_url, query, file)
            if isinstance(outcome, Failure):
                failure = ProviderFailure(provider_url, f"retries exhausted ({outcome.error})")
            else:
                answer = self._normalize(outcome.payload)
                if answer:
                    logger.info(f"Provider {provider_url} answered", extra={"provider": provider_url})
                    return answer
                failure = ProviderFailure(provider_url, "empty answer")
            logger.warning(f"Falling back: {failure}", extra={"provider": provider_url})
            failures.append(failure)

        logger.error(f"All {len(failures)} providers failed")
        raise AllProvidersFailed(failures)
