"""HTTP server instrumentation."""

from traceparent.instrumentation.http_server import (
    TRACE_SCOPE_KEY,
    TraceparentMiddleware,
    TraceparentWSGIMiddleware,
    get_request_trace,
)
from traceparent.instrumentation.fastapi import install_http_middleware

__all__ = [
    "TRACE_SCOPE_KEY",
    "TraceparentMiddleware",
    "TraceparentWSGIMiddleware",
    "get_request_trace",
    "install_http_middleware",
]
