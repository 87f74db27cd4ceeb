"""traceparent: W3C traceparent middleware for log correlation."""

from __future__ import annotations

import logging
from typing import Optional, Union

from traceparent import runtime_config
from traceparent.context import (
    TraceContext,
    extract_traceparent,
    get_current_trace,
    parse_traceparent,
    use_trace,
    use_trace_context,
)
from traceparent.errors import ConfigError
from traceparent.instrumentation import (
    TraceparentMiddleware,
    TraceparentWSGIMiddleware,
    get_request_trace,
    install_http_middleware,
)
from traceparent.logs import TraceContextFilter, install_log_filter

__version__ = "0.1.0"

_logger = logging.getLogger(__name__)


def configure(
    project_id: Optional[str] = None,
    target: Union[logging.Logger, logging.Handler, None] = None,
    install_logging: bool = True,
) -> Optional[TraceContextFilter]:
    """
    Set runtime configuration and hook trace fields into logging.

    Args:
        project_id: Cloud project used to build full trace resource names.
            Falls back to TRACEPARENT_PROJECT_ID, then GOOGLE_CLOUD_PROJECT.
        target: Logger or handler receiving the filter (root logger by default)
        install_logging: Set to False to only update the runtime config

    Returns:
        The installed filter, or None when logging was left alone
    """
    if project_id is not None and not isinstance(project_id, str):
        raise ConfigError("project_id must be a string", {"project_id": project_id})

    runtime_config.reset()
    if project_id:
        runtime_config.set_project_id(project_id)
    else:
        runtime_config.load_from_env()

    _logger.debug("traceparent configured (project_id=%s)", runtime_config.get_project_id())

    if not install_logging:
        return None
    return install_log_filter(target)


__all__ = [
    "__version__",
    "configure",
    "TraceContext",
    "TraceContextFilter",
    "TraceparentMiddleware",
    "TraceparentWSGIMiddleware",
    "extract_traceparent",
    "get_current_trace",
    "get_request_trace",
    "install_http_middleware",
    "install_log_filter",
    "parse_traceparent",
    "use_trace",
    "use_trace_context",
]
