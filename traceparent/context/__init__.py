"""Context utilities for traceparent."""

from traceparent.context.context import (
    attach_trace,
    detach_trace,
    get_current_trace,
    set_trace_in_context,
    use_trace,
    use_trace_context,
)
from traceparent.context.propagators import (
    TRACEPARENT_HEADER,
    extract_traceparent,
    get_header,
    parse_trace_flags,
    parse_traceparent,
)
from traceparent.context.trace_context import TraceContext

__all__ = [
    "TraceContext",
    "TRACEPARENT_HEADER",
    "attach_trace",
    "detach_trace",
    "get_current_trace",
    "set_trace_in_context",
    "use_trace",
    "use_trace_context",
    "extract_traceparent",
    "get_header",
    "parse_trace_flags",
    "parse_traceparent",
]
