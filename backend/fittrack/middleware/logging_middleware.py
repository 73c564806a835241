"""
ASGI middleware that logs every API request and its response.

Written as a plain ASGI callable (not BaseHTTPMiddleware) so it works with
any response type. Logs method, path, status, duration and sanitized
request/response bodies; credentials are masked before logging.
"""

import json
import logging
import time
from typing import Iterable, List, Optional
from urllib.parse import parse_qsl, urlencode

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)

MAX_BODY_LOG = 5000


def sanitize_body(chunks: List[bytes], max_length: int = MAX_BODY_LOG) -> Optional[str]:
    """Join body chunks; mask credentials if JSON, then cap the length."""
    raw = b"".join(chunks)
    if not raw:
        return None
    text = raw.decode("utf-8", errors="ignore")
    try:
        text = json.dumps(filter_sensitive_data(json.loads(text)), ensure_ascii=False)
    except json.JSONDecodeError:
        # Form posts (login) carry credentials too
        form = parse_qsl(text)
        if form:
            text = urlencode(filter_sensitive_data(dict(form)))
    return truncate_large_data(text, max_length=max_length)


def error_reason(body: Optional[str]) -> Optional[str]:
    """Pull a short reason ("detail"/"error"/...) out of an error response body."""
    if not body:
        return None
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return truncate_large_data(body, max_length=500)
    if isinstance(payload, dict):
        for key in ("detail", "error", "message"):
            if payload.get(key):
                return truncate_large_data(str(payload[key]), max_length=500)
    return truncate_large_data(json.dumps(payload, ensure_ascii=False), max_length=500)


class RequestLoggingMiddleware:
    """Pure ASGI middleware logging HTTP requests and responses."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Iterable[str]] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths that are never logged (e.g. liveness probes)
        """
        self.app = app
        self.exclude_paths = set(exclude_paths or ("/health", "/"))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        request_id = id(scope)
        query = scope.get("query_string", b"").decode("utf-8", errors="ignore")
        client = scope.get("client")

        request_chunks: List[bytes] = []
        response_chunks: List[bytes] = []
        status_code = 0

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_chunks.append(message.get("body", b""))
            return message

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body":
                response_chunks.append(message.get("body", b""))
            await send(message)

        logger.info(
            f"Request started: {method} {path}",
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "query_params": filter_sensitive_data(dict(parse_qsl(query))) if query else None,
                "client": client[0] if client else None,
            }}
        )

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {e}",
                exc_info=True,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "error": str(e),
                }}
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        request_body = sanitize_body(request_chunks)
        response_body = sanitize_body(response_chunks)
        reason = error_reason(response_body) if status_code >= 400 else None

        if status_code < 400:
            level = logging.INFO
        elif status_code < 500:
            level = logging.WARNING
        else:
            level = logging.ERROR

        message = f"Request completed: {method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if reason:
            message += f" | error_reason={reason}"

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Request body: {request_body or '-'} | Response body: {response_body or '-'}")

        logger.log(
            level,
            message,
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "request_body": request_body,
                "response_body": response_body,
                "error_reason": reason,
            }}
        )
