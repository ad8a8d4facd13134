"""Building JSON responses."""

from __future__ import annotations

import dataclasses
import json
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from flask import Response

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = "application/json"
_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _format_time(value: datetime) -> str:
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None or offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _default(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return _format_time(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode(payload: Any) -> str:
    text = json.dumps(
        payload,
        default=_default,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    for char, escape in _ESCAPES.items():
        text = text.replace(char, escape)
    return text


def respond_with_json(code: int, payload: Any) -> Response:
    """Return ``payload`` encoded as JSON with status ``code``."""
    try:
        body = _encode(payload)
    except (TypeError, ValueError) as exc:
        logger.error("Error marshalling JSON: %s", exc)
        return Response(status=500, content_type=_JSON_CONTENT_TYPE)
    return Response(body, status=code, content_type=_JSON_CONTENT_TYPE)


def respond_with_error(code: int, message: str) -> Response:
    """Return a JSON object ``{"error": message}`` with status ``code``."""
    return respond_with_json(code, {"error": message})