"""Request-scoped trace storage - using OpenTelemetry's context API directly."""

from contextlib import contextmanager
from contextvars import Token
from typing import Any, Iterator, Optional

from opentelemetry import context as context_api
from opentelemetry.context import Context

from traceparent.context.propagators import extract_traceparent
from traceparent.context.trace_context import TraceContext

_TRACE_KEY = context_api.create_key("traceparent-trace")


def set_trace_in_context(trace: TraceContext, context: Optional[Context] = None) -> Context:
    """
    Return a new context derived from ``context`` (or the current one) carrying ``trace``.

    The source context is left untouched; OTel contexts are immutable.
    """
    return context_api.set_value(_TRACE_KEY, trace, context)


def get_current_trace(context: Optional[Context] = None) -> Optional[TraceContext]:
    """
    Return the trace attached to ``context``, or to the current context.
    """
    return context_api.get_value(_TRACE_KEY, context)


def attach_trace(trace: TraceContext) -> Token:
    """
    Make ``trace`` current for the running task or thread.

    Returns:
        Token needed to restore the previous state
    """
    return context_api.attach(set_trace_in_context(trace))


def detach_trace(token: Token) -> None:
    """
    Restore the context that was current before ``attach_trace``.

    Args:
        token: Token returned by attach_trace()
    """
    context_api.detach(token)


@contextmanager
def use_trace(trace: Optional[TraceContext]) -> Iterator[Optional[TraceContext]]:
    """Attach ``trace`` for the duration of the block. ``None`` attaches nothing."""
    if trace is None:
        yield None
        return
    token = attach_trace(trace)
    try:
        yield trace
    finally:
        detach_trace(token)


@contextmanager
def use_trace_context(headers: Any) -> Iterator[Optional[TraceContext]]:
    """
    Extract the trace from ``headers`` and attach it for the duration of the block.

    Handy outside of an HTTP server, e.g. for queue consumers that receive
    the traceparent alongside a message.
    """
    with use_trace(extract_traceparent(headers)) as trace:
        yield trace
