"""Answer extraction from heterogeneous provider payloads."""

from __future__ import annotations

import json
from typing import Any, Optional

__all__ = ["normalize_answer"]

_ANSWER_FIELDS = ("result", "answer", "output")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _first_choice(payload: dict) -> Optional[dict]:
    choices = payload.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return None


def normalize_answer(payload: Any) -> Optional[str]:
    """Extract one answer string from a decoded provider response.

    Probe order: plain string, ``result``, ``answer``, ``output``,
    ``choices[0].text``, ``choices[0].message.content``; anything else is
    returned as compact JSON.  Only an empty payload yields ``None``.
    """
    if payload is None or (not isinstance(payload, (dict, list)) and not payload):
        return None
    if isinstance(payload, str):
        return payload

    if isinstance(payload, dict):
        for name in _ANSWER_FIELDS:
            value = payload.get(name)
            if value:
                return _as_text(value)

        choice = _first_choice(payload)
        if choice is not None:
            if choice.get("text"):
                return _as_text(choice["text"])
            message = choice.get("message")
            if isinstance(message, dict) and message.get("content"):
                return _as_text(message["content"])

    return _as_text(payload)
