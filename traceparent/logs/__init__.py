"""Log correlation for the inbound trace."""

from traceparent.logs.log_filter import TraceContextFilter, install_log_filter

__all__ = ["TraceContextFilter", "install_log_filter"]
