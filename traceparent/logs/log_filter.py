"""Logging filter that stamps the current trace onto log records."""

from __future__ import annotations

import logging
from typing import Optional, Union

from traceparent import runtime_config
from traceparent.context import get_current_trace

_PLAIN_FIELDS = ("trace_id", "span_id", "trace_sampled")


class TraceContextFilter(logging.Filter):
    """
    Adds trace fields to every record using the standard logging module.

    Formatters can use ``%(trace_id)s``, ``%(span_id)s`` and
    ``%(trace_sampled)s``; JSON formatters additionally pick up the Cloud
    Logging keys (``logging.googleapis.com/trace`` etc.) when a trace is
    active. Records are never dropped.
    """

    def __init__(self, project_id: Optional[str] = None) -> None:
        super().__init__()
        self.project_id = project_id

    def filter(self, record: logging.LogRecord) -> bool:
        trace = get_current_trace()
        if trace is None:
            for name in _PLAIN_FIELDS:
                setattr(record, name, None)
            return True

        record.trace_id = trace.id
        record.span_id = trace.span_id
        record.trace_sampled = trace.sampled
        project_id = self.project_id or runtime_config.get_project_id()
        record.__dict__.update(trace.log_fields(project_id))
        return True


def install_log_filter(
    target: Union[logging.Logger, logging.Handler, None] = None,
    project_id: Optional[str] = None,
) -> TraceContextFilter:
    """
    Attach a TraceContextFilter to a handler, or to every handler of a logger.

    Defaults to the root logger. Handler filters also see records propagated
    from child loggers; a logger without handlers gets the filter itself.
    Targets that already carry a TraceContextFilter keep it; its project_id
    is updated when one is given. Returns the new filter if it was added
    anywhere, otherwise the filter already in place.
    """
    if target is None:
        target = logging.getLogger()

    log_filter = TraceContextFilter(project_id=project_id)
    if isinstance(target, logging.Logger) and target.handlers:
        targets = list(target.handlers)
    else:
        targets = [target]

    existing = None
    installed = False
    for item in targets:
        current = next((f for f in item.filters if isinstance(f, TraceContextFilter)), None)
        if current is None:
            item.addFilter(log_filter)
            installed = True
            continue
        if project_id is not None:
            current.project_id = project_id
        existing = existing or current

    if installed or existing is None:
        return log_filter
    return existing
