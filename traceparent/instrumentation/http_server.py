"""HTTP server middleware that attaches the inbound trace to the request."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from traceparent.context import attach_trace, detach_trace, extract_traceparent, parse_traceparent, use_trace
from traceparent.context.trace_context import TraceContext

# Key under which the trace is stored on the derived ASGI scope / WSGI environ.
TRACE_SCOPE_KEY = "traceparent"
_WSGI_HEADER = "HTTP_TRACEPARENT"

Scope = Dict[str, Any]
ASGIApp = Callable[[Scope, Callable[[], Awaitable[Any]], Callable[[Any], Awaitable[None]]], Awaitable[None]]
WSGIApp = Callable[[Dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class TraceparentMiddleware:
    """
    Pure ASGI middleware for the traceparent header.

    - ``http`` and ``websocket`` requests with a valid version 00 header run
      with a copied scope holding the trace under ``scope["traceparent"]``
      and with the trace attached to the current context.
    - Everything else, including malformed headers, is passed through with
      the original scope.

    The wrapped app is always awaited exactly once and the response is never
    touched.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive, send) -> None:
        trace = None
        if scope.get("type") in ("http", "websocket"):
            trace = extract_traceparent(scope.get("headers"))

        if trace is None:
            await self.app(scope, receive, send)
            return

        derived = dict(scope)
        derived[TRACE_SCOPE_KEY] = trace
        with use_trace(trace):
            await self.app(derived, receive, send)


class TraceparentWSGIMiddleware:
    """
    WSGI counterpart of TraceparentMiddleware.

    The trace is stored under ``environ["traceparent"]`` of a copied environ
    and attached to the current context while the app callable runs and
    while the body it returns is iterated and closed.
    """

    def __init__(self, app: WSGIApp) -> None:
        self.app = app

    def __call__(self, environ: Dict[str, Any], start_response):
        trace = parse_traceparent(environ.get(_WSGI_HEADER, ""))
        if trace is None:
            return self.app(environ, start_response)

        derived = dict(environ)
        derived[TRACE_SCOPE_KEY] = trace
        with use_trace(trace):
            body = self.app(derived, start_response)
        return _TracedBody(body, trace)


class _TracedBody:
    """WSGI body iterable that re-attaches the trace for each chunk and on close."""

    def __init__(self, body: Iterable[bytes], trace: TraceContext) -> None:
        self._body = body
        self._trace = trace
        self._iterator = None

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        token = attach_trace(self._trace)
        try:
            if self._iterator is None:
                self._iterator = iter(self._body)
            return next(self._iterator)
        finally:
            detach_trace(token)

    def close(self) -> None:
        close = getattr(self._body, "close", None)
        if close is None:
            return
        token = attach_trace(self._trace)
        try:
            close()
        finally:
            detach_trace(token)


def get_request_trace(request: Any) -> Optional[TraceContext]:
    """
    Return the trace stored by the middleware.

    Accepts an ASGI scope, a WSGI environ, or a request object exposing
    ``.scope`` (Starlette/FastAPI) or ``.environ`` (Werkzeug/Flask).
    """
    for attr in ("scope", "environ"):
        carrier = getattr(request, attr, None)
        if isinstance(carrier, dict):
            request = carrier
            break
    if not isinstance(request, dict):
        return None
    trace = request.get(TRACE_SCOPE_KEY)
    return trace if isinstance(trace, TraceContext) else None

