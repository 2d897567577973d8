"""HTTP surface of the gateway.

Routes:
- ``GET /``          liveness banner.
- ``POST /api/chat`` answer a query; ``q``/``providers`` come from the form
  or JSON body, falling back to query parameters, and an optional ``file``
  part is stored through :class:`UploadStore`.
- ``GET /health``    status JSON.

Errors map to plain-text responses: malformed body or missing input 400,
no providers 500, all providers failed 502.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import UploadFile

from core.config import AppSettings, GatewayConfig, get_settings
from core.errors import AllProvidersFailed, InvalidRequestBody, MissingInput, NoProvidersConfigured
from core.logging import logger

from .service import AnswerService
from .uploads import UploadedFile, UploadStore

__all__ = ["SimpleRateLimiter", "create_app"]


class SimpleRateLimiter:
    """Sliding-window request counter per client key."""

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.limit = limit
        self.window = window_seconds
        self._events: Dict[str, List[float]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self._last_sweep = clock()

    async def check(self, key: str) -> bool:
        async with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            events = [stamp for stamp in self._events.get(key, []) if now - stamp < self.window]
            if len(events) >= self.limit:
                self._events[key] = events
                return False
            events.append(now)
            self._events[key] = events
            return True

    def _sweep(self, now: float) -> None:
        # forget clients with no event inside the window
        stale = [key for key, events in self._events.items() if not events or now - events[-1] >= self.window]
        for key in stale:
            del self._events[key]
        self._last_sweep = now

    def __len__(self) -> int:
        return len(self._events)


async def _read_chat_input(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """Collect body fields and the optional upload for /api/chat."""
    fields: Dict[str, Any] = {}
    upload: Optional[UploadFile] = None
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise InvalidRequestBody("Malformed JSON body.") from e
        if isinstance(body, dict):
            fields = body
    elif content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        for name, value in form.multi_items():
            if isinstance(value, UploadFile):
                if name == "file" and upload is None:
                    upload = value
            else:
                fields.setdefault(name, value)
    return fields, upload


def _pick(fields: Dict[str, Any], request: Request, name: str) -> Optional[str]:
    value = fields.get(name) or request.query_params.get(name)
    if value is None:
        return None
    return str(value)


def _pick_providers(fields: Dict[str, Any], request: Request) -> Union[str, List[str], None]:
    """Providers override: a JSON list is kept as a list, anything else as a string."""
    value = fields.get("providers")
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return _pick(fields, request, "providers")


def create_app(
    service: Optional[AnswerService] = None,
    settings: Optional[AppSettings] = None,
    store: Optional[UploadStore] = None,
) -> FastAPI:
    """Build the FastAPI application around one AnswerService."""
    settings = settings or get_settings()
    service = service or AnswerService(GatewayConfig.from_settings(settings))
    store = store or UploadStore(settings.UPLOAD_DIR)
    limiter = SimpleRateLimiter(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW)

    app = FastAPI(title="Maka Gateway")
    app.state.service = service
    app.state.store = store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        if not await limiter.check(client):
            logger.warning(f"Rate limit exceeded for {client}", extra={"client": client})
            return PlainTextResponse("Too many requests, please try again later.", status_code=429)
        return await call_next(request)

    @app.get("/")
    async def root():
        return PlainTextResponse("Maka AI Backend is live!")

    @app.get("/health")
    async def health():
        return JSONResponse({
            "status": "ok",
            "env": settings.APP_ENV,
            "now": int(time.time() * 1000),
        })

    @app.post("/api/chat")
    async def chat(request: Request):
        try:
            fields, upload = await _read_chat_input(request)
        except InvalidRequestBody as e:
            return PlainTextResponse(str(e), status_code=400)
        q = _pick(fields, request, "q")
        providers = _pick_providers(fields, request)

        attached: Optional[UploadedFile] = None
        if upload is not None:
            attached = store.save(upload.filename or "upload", await upload.read())

        try:
            answer = await service.answer(q, file=attached, providers=providers)
        except MissingInput as e:
            return PlainTextResponse(str(e), status_code=400)
        except NoProvidersConfigured as e:
            return PlainTextResponse(str(e), status_code=500)
        except AllProvidersFailed as e:
            return PlainTextResponse(str(e), status_code=502)
        return PlainTextResponse(answer)

    return app
