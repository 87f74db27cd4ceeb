"""Tests for the ASGI and WSGI traceparent middleware."""

import asyncio

import pytest

from traceparent import (
    TraceContext,
    TraceparentMiddleware,
    TraceparentWSGIMiddleware,
    get_current_trace,
    get_request_trace,
)

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
SPAN_ID = "00f067aa0ba902b7"
SAMPLED = f"00-{TRACE_ID}-{SPAN_ID}-01"

MALFORMED = [
    "",
    f"01-{TRACE_ID}-{SPAN_ID}-01",
    "00-abc-def",
    "00-abc-def-zz",
    "00-abc-def-80",
    f"{SAMPLED}-extra",
]


async def _receive():
    return {"type": "http.request", "body": b"", "more_body": False}


async def _send(message):
    return None


def _http_scope(traceparent=None):
    headers = [(b"host", b"testserver")]
    if traceparent is not None:
        headers.append((b"traceparent", traceparent.encode()))
    return {"type": "http", "method": "GET", "path": "/", "headers": headers}


class RecordingApp:
    """ASGI app recording the scope and ambient trace of each call."""

    def __init__(self):
        self.calls = []

    async def __call__(self, scope, receive, send):
        self.calls.append((scope, get_current_trace()))


def _run(app, scope):
    asyncio.run(app(scope, _receive, _send))


class TestASGIMiddleware:

    def test_valid_header_attaches_trace(self):
        inner = RecordingApp()
        _run(TraceparentMiddleware(inner), _http_scope(SAMPLED))

        assert len(inner.calls) == 1
        scope, current = inner.calls[0]
        expected = TraceContext(id=TRACE_ID, span_id=SPAN_ID, sampled=True)
        assert get_request_trace(scope) == expected
        assert current == expected

    def test_not_sampled_header(self):
        inner = RecordingApp()
        _run(TraceparentMiddleware(inner), _http_scope(f"00-{TRACE_ID}-{SPAN_ID}-00"))
        assert inner.calls[0][1].sampled is False

    def test_derived_scope_is_a_copy(self):
        inner = RecordingApp()
        scope = _http_scope(SAMPLED)
        _run(TraceparentMiddleware(inner), scope)

        passed, _ = inner.calls[0]
        assert passed is not scope
        assert "traceparent" not in scope
        assert passed["headers"] == scope["headers"]

    def test_missing_header_passes_through(self):
        inner = RecordingApp()
        scope = _http_scope()
        _run(TraceparentMiddleware(inner), scope)

        assert inner.calls == [(scope, None)]
        assert inner.calls[0][0] is scope

    @pytest.mark.parametrize("header", MALFORMED)
    def test_malformed_header_passes_through(self, header):
        inner = RecordingApp()
        scope = _http_scope(header)
        _run(TraceparentMiddleware(inner), scope)

        assert len(inner.calls) == 1
        passed, current = inner.calls[0]
        assert passed is scope
        assert current is None
        assert get_request_trace(passed) is None

    def test_websocket_scope(self):
        inner = RecordingApp()
        scope = _http_scope(SAMPLED)
        scope["type"] = "websocket"
        _run(TraceparentMiddleware(inner), scope)
        assert inner.calls[0][1].id == TRACE_ID

    def test_lifespan_scope_untouched(self):
        inner = RecordingApp()
        scope = {"type": "lifespan"}
        _run(TraceparentMiddleware(inner), scope)
        assert inner.calls == [(scope, None)]

    def test_wrapping_twice_gives_same_trace(self):
        inner = RecordingApp()
        once = RecordingApp()
        _run(TraceparentMiddleware(TraceparentMiddleware(inner)), _http_scope(SAMPLED))
        _run(TraceparentMiddleware(once), _http_scope(SAMPLED))

        assert len(inner.calls) == 1
        assert inner.calls[0][1] == once.calls[0][1]
        assert get_request_trace(inner.calls[0][0]) == get_request_trace(once.calls[0][0])

    def test_app_errors_propagate(self):
        async def failing(scope, receive, send):
            raise RuntimeError("handler failed")

        with pytest.raises(RuntimeError, match="handler failed"):
            _run(TraceparentMiddleware(failing), _http_scope(SAMPLED))

    def test_response_messages_untouched(self):
        sent = []

        async def app(scope, receive, send):
            await send({"type": "http.response.start", "status": 204, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        async def send(message):
            sent.append(message)

        asyncio.run(TraceparentMiddleware(app)(_http_scope(SAMPLED), _receive, send))
        assert sent == [
            {"type": "http.response.start", "status": 204, "headers": []},
            {"type": "http.response.body", "body": b""},
        ]


class TestWSGIMiddleware:

    @staticmethod
    def _environ(traceparent=None):
        environ = {"REQUEST_METHOD": "GET", "PATH_INFO": "/"}
        if traceparent is not None:
            environ["HTTP_TRACEPARENT"] = traceparent
        return environ

    @staticmethod
    def _app(calls):
        def app(environ, start_response):
            calls.append((environ, get_current_trace()))
            start_response("200 OK", [("Content-Type", "text/plain")])
            return [b"ok"]
        return app

    def test_valid_header_attaches_trace(self):
        calls = []
        environ = self._environ(SAMPLED)
        body = TraceparentWSGIMiddleware(self._app(calls))(environ, lambda status, headers: None)

        assert list(body) == [b"ok"]
        passed, current = calls[0]
        assert passed is not environ
        assert current == TraceContext(id=TRACE_ID, span_id=SPAN_ID, sampled=True)
        assert get_request_trace(passed) == current
        assert get_current_trace() is None

    @pytest.mark.parametrize("header", MALFORMED + [None])
    def test_malformed_header_passes_through(self, header):
        calls = []
        environ = self._environ(header)
        TraceparentWSGIMiddleware(self._app(calls))(environ, lambda status, headers: None)

        assert calls == [(environ, None)]
        assert calls[0][0] is environ

    def test_streamed_body_sees_trace(self):
        seen = []
        closed = []

        def app(environ, start_response):
            start_response("200 OK", [("Content-Type", "text/plain")])

            def body():
                try:
                    for chunk in (b"a", b"b"):
                        seen.append(get_current_trace())
                        yield chunk
                finally:
                    closed.append(get_current_trace())

            return body()

        response = TraceparentWSGIMiddleware(app)(self._environ(SAMPLED), lambda status, headers: None)
        assert get_current_trace() is None

        chunks = []
        for chunk in response:
            chunks.append(chunk)
            assert get_current_trace() is None
        response.close()

        expected = TraceContext(id=TRACE_ID, span_id=SPAN_ID, sampled=True)
        assert chunks == [b"a", b"b"]
        assert seen == [expected, expected]
        assert closed == [expected]
        assert get_current_trace() is None

    def test_close_forwarded_to_body(self):
        class Body:
            closed = False

            def __iter__(self):
                return iter([b"x"])

            def close(self):
                Body.closed = True

        def app(environ, start_response):
            start_response("200 OK", [])
            return Body()

        response = TraceparentWSGIMiddleware(app)(self._environ(SAMPLED), lambda status, headers: None)
        response.close()
        assert Body.closed is True

    def test_app_errors_propagate_and_detach(self):
        def failing(environ, start_response):
            raise ValueError("boom")

        with pytest.raises(ValueError):
            TraceparentWSGIMiddleware(failing)(self._environ(SAMPLED), lambda status, headers: None)
        assert get_current_trace() is None


def test_get_request_trace_from_request_object():
    class FakeRequest:
        def __init__(self, scope):
            self.scope = scope

    trace = TraceContext(id="abc", span_id="def")
    assert get_request_trace(FakeRequest({"traceparent": trace})) is trace
    assert get_request_trace(FakeRequest({})) is None
    assert get_request_trace(object()) is None
