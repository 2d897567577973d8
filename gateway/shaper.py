"""Request shaping for upstream providers.

A provider is only known by its URL template, so the wire format is inferred
from the template itself.  Rules are checked in a fixed order and the first
match wins:

1. ``MULTIPART``  – a file is attached and the template contains ``image=``.
2. ``QUERY_GET``  – the template contains ``?`` and ``=`` (and no ``image=``).
3. ``JSON_POST``  – everything else.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import quote

from .uploads import UploadedFile

__all__ = [
    "RequestShape",
    "ShapedRequest",
    "encode_component",
    "shape_request",
]

_IMAGE_MARKER = "image="
_Q_PARAM = re.compile(r"([?&])q=[^&]*")


class RequestShape(str, Enum):
    """Wire formats the gateway knows how to send."""
    MULTIPART = "multipart"
    QUERY_GET = "query_get"
    JSON_POST = "json_post"


@dataclass(frozen=True)
class ShapedRequest:
    """Outbound request, ready to be handed to an HTTP client."""
    shape: RequestShape
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    json: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, str]] = None
    file: Optional[UploadedFile] = None


def encode_component(text: str) -> str:
    """Percent-encode like JavaScript's ``encodeURIComponent``."""
    return quote(text, safe="-_.!~*'()")


def _auth_headers(credential: Optional[str]) -> Dict[str, str]:
    if credential:
        return {"Authorization": f"Bearer {credential}"}
    return {}


def _query_url(provider_url: str, query: str) -> str:
    encoded = encode_component(query)
    if _Q_PARAM.search(provider_url):
        return _Q_PARAM.sub(lambda m: f"{m.group(1)}q={encoded}", provider_url, count=1)
    # trailing '=' and raw-suffix templates both append
    return provider_url + encoded


def shape_request(
    provider_url: str,
    query: str,
    file: Optional[UploadedFile] = None,
    credential: Optional[str] = None,
) -> ShapedRequest:
    """Pick the wire format for *provider_url* and build the request."""
    headers = _auth_headers(credential)

    if file is not None and _IMAGE_MARKER in provider_url:
        data = {"q": query} if query else None
        return ShapedRequest(
            shape=RequestShape.MULTIPART,
            method="POST",
            url=provider_url.split("?")[0],
            headers=headers,
            data=data,
            file=file,
        )

    if "?" in provider_url and "=" in provider_url and _IMAGE_MARKER not in provider_url:
        return ShapedRequest(
            shape=RequestShape.QUERY_GET,
            method="GET",
            url=_query_url(provider_url, query),
            headers=headers,
        )

    headers = {"Content-Type": "application/json", **headers}
    return ShapedRequest(
        shape=RequestShape.JSON_POST,
        method="POST",
        url=provider_url,
        headers=headers,
        json={"q": query},
    )
