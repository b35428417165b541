"""Turn API error bodies into readable messages

The backend is not consistent about how it reports failures. Each decoder
below handles one known shape and returns ``None`` when the shape does not
apply; they are tried in order and the first non-empty message wins.
"""

import json
from typing import Any, Callable, List, Optional, Tuple

import pydantic
from pydantic import BaseModel


class FieldError(BaseModel):
    error: Optional[str] = ""
    field: Optional[str] = ""
    type: Optional[str] = ""


class ErrorMeta(BaseModel):
    code: Optional[int] = None
    message: Optional[str] = ""
    errors: Optional[List[FieldError]] = None


class ErrorEnvelope(BaseModel):
    meta: Optional[ErrorMeta] = None


def _parse_envelope(payload: Any) -> Optional[ErrorEnvelope]:
    if not isinstance(payload, dict):
        return None
    try:
        return ErrorEnvelope.model_validate(payload)
    except pydantic.ValidationError:
        return None


def from_field_errors(payload: Any) -> Optional[str]:
    """``meta.errors``: one line per entry, prefixed with the field name"""
    envelope = _parse_envelope(payload)
    if envelope is None or envelope.meta is None or not envelope.meta.errors:
        return None

    lines = []
    for entry in envelope.meta.errors:
        error = entry.error or ""
        if entry.field:
            lines.append(f"{entry.field}: {error}")
        elif error:
            lines.append(error)
    return "\n".join(lines) or None


def from_meta_message(payload: Any) -> Optional[str]:
    """``meta.message``"""
    envelope = _parse_envelope(payload)
    if envelope is None or envelope.meta is None:
        return None
    return envelope.meta.message or None


def from_detail(payload: Any) -> Optional[str]:
    """``{"detail": "..."}`` as produced by the framework's default handlers"""
    if not isinstance(payload, dict):
        return None
    detail = payload.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    return None


ERROR_DECODERS: Tuple[Callable[[Any], Optional[str]], ...] = (
    from_field_errors,
    from_meta_message,
    from_detail,
)


def decode_error_message(body: bytes, status_code: int) -> str:
    """Build the error message for a failed response

    Args:
        body: Raw response body
        status_code: HTTP status code of the response

    Returns:
        The first message produced by ``ERROR_DECODERS``, or a generic
        message containing the raw body
    """
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None

    if payload is not None:
        for decoder in ERROR_DECODERS:
            message = decoder(payload)
            if message:
                return message

    text = body.decode("utf-8", errors="replace") if body else ""
    return f"request failed (status {status_code}): {text}"
