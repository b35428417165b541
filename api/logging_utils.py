"""
Logging utilities for request debugging and tracing.
"""
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ('authorization', 'cookie', 'x-api-key')
SENSITIVE_FIELDS = ('password', 'access_token', 'refresh_token')
MAX_LOGGED_BODY = 2000


def redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Copy of ``headers`` with credentials replaced by [REDACTED]"""
    return {
        name: "[REDACTED]" if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def log_request(method: str, url: str, headers: Optional[Dict[str, str]] = None, body: Optional[bytes] = None):
    """Log outgoing request details"""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"--> {method} {url}")
    if headers:
        for header_name, header_value in redact_headers(headers).items():
            logger.debug(f"    {header_name}: {header_value}")
    if body:
        text = body.decode("utf-8", errors="replace")
        if any(f'"{field}"' in text for field in SENSITIVE_FIELDS):
            logger.debug(f"    body: [REDACTED {len(body)} bytes]")
        else:
            logger.debug(f"    body: {text[:MAX_LOGGED_BODY]}")


def log_response(status_code: int, body: bytes):
    """Log response status and (truncated) body"""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"<-- {status_code} ({len(body)} bytes)")
    if body:
        text = body.decode("utf-8", errors="replace")
        if any(f'"{field}"' in text for field in SENSITIVE_FIELDS):
            logger.debug("    body: [REDACTED]")
        else:
            logger.debug(f"    body: {text[:MAX_LOGGED_BODY]}")
