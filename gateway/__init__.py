"""Provider dispatch engine: request shaping, retry, fallback and caching.

The sub-modules are designed to be composed by :class:`AnswerService`; each
piece can also be used and tested on its own.
"""

from __future__ import annotations

from .cache import ResponseCache, cache_key
from .caller import AttemptOutcome, Failure, ProviderCaller, RetryPolicy, Success
from .credentials import CredentialResolver
from .dispatcher import FallbackDispatcher
from .normalizer import normalize_answer
from .service import AnswerService
from .shaper import RequestShape, ShapedRequest, shape_request
from .uploads import UploadedFile, UploadStore

__all__ = [
    "AnswerService",
    "AttemptOutcome",
    "CredentialResolver",
    "Failure",
    "FallbackDispatcher",
    "ProviderCaller",
    "RequestShape",
    "ResponseCache",
    "RetryPolicy",
    "ShapedRequest",
    "Success",
    "UploadStore",
    "UploadedFile",
    "cache_key",
    "normalize_answer",
    "shape_request",
]
