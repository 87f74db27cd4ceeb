"""Immutable trace metadata taken from an inbound traceparent header."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Structured field names understood by Google Cloud Logging.
TRACE_KEY = "logging.googleapis.com/trace"
SPAN_ID_KEY = "logging.googleapis.com/spanId"
TRACE_SAMPLED_KEY = "logging.googleapis.com/trace_sampled"


@dataclass(frozen=True)
class TraceContext:
    """
    Trace and span identifiers for one request.

    The identifiers are kept verbatim from the header; only the structure of
    the header is checked, never the length or charset of the ids.
    """

    id: str
    span_id: str
    sampled: bool = False

    def trace_name(self, project_id: Optional[str] = None) -> str:
        """Full trace resource name when a project is known, else the bare id."""
        if project_id:
            return f"projects/{project_id}/traces/{self.id}"
        return self.id

    def log_fields(self, project_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            TRACE_KEY: self.trace_name(project_id),
            SPAN_ID_KEY: self.span_id,
            TRACE_SAMPLED_KEY: self.sampled,
        }
