"""The AnswerQuery operation: validate, consult the cache, dispatch, cache."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union

import httpx

from core.config import GatewayConfig, split_providers
from core.errors import MissingInput, NoProvidersConfigured
from core.logging import logger

from .cache import ResponseCache, cache_key
from .caller import ProviderCaller, RetryPolicy
from .credentials import CredentialResolver
from .dispatcher import FallbackDispatcher
from .uploads import UploadedFile

__all__ = ["AnswerService"]


class AnswerService:
    """Answers client queries through the provider dispatch engine.

    One instance lives for the whole process; it owns the response cache and
    the credential table.  Each ``answer`` call opens its own HTTP client.
    """

    def __init__(
        self,
        config: GatewayConfig,
        cache: Optional[ResponseCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else ResponseCache(config.cache_ttl)
        self.credentials = CredentialResolver(config.credentials)
        self._retry = RetryPolicy(config.attempts, config.backoff, sleep=sleep)
        self._transport = transport

    def resolve_providers(self, override: Union[str, Iterable[str], None] = None) -> List[str]:
        """Per-request override when given, configured defaults otherwise."""
        if not override:
            return list(self.config.providers)
        if isinstance(override, str):
            return split_providers(override)
        return [p.strip() for p in override if p and p.strip()]

    async def answer(
        self,
        text: Optional[str] = None,
        file: Optional[UploadedFile] = None,
        providers: Union[str, Iterable[str], None] = None,
    ) -> str:
        query = text or ""
        if not query and file is None:
            raise MissingInput("Missing q (query) or file.")

        key = cache_key(query)
        cached = await self.cache.get(key)
        if cached:
            logger.info(f"Cache hit for {key!r}", extra={"cache_key": key})
            return cached

        provider_list = self.resolve_providers(providers)
        if not provider_list:
            raise NoProvidersConfigured("No providers configured.")

        async with httpx.AsyncClient(transport=self._transport) as client:
            caller = ProviderCaller(client, self.credentials, self._retry, timeout=self.config.timeout)
            answer = await FallbackDispatcher(caller).dispatch(provider_list, query, file)

        await self.cache.set(key, answer)
        return answer
