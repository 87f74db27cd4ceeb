"""
FastAPI helpers for correlating request logs with the inbound traceparent.
"""

from __future__ import annotations

from typing import Any

from traceparent.instrumentation.http_server import TraceparentMiddleware


def install_http_middleware(app: Any) -> None:
    """
    Register TraceparentMiddleware on a FastAPI (or Starlette) application.

    - Parses the incoming ``traceparent`` header
    - Exposes the trace as ``request.scope["traceparent"]`` and via
      ``traceparent.get_current_trace()`` for the rest of the request
    """
    app.add_middleware(TraceparentMiddleware)
    return None
