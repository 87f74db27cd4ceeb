"""W3C traceparent header parsing."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from traceparent.context.trace_context import TraceContext
from traceparent.errors import TraceFlagsError

TRACEPARENT_HEADER = "traceparent"
SUPPORTED_VERSION = "00"

# Signed 8-bit range, same as a strict base-16 integer parse with bit size 8.
_FLAGS_MIN = -128
_FLAGS_MAX = 127
_FLAGS_RE = re.compile(r"[+-]?[0-9a-fA-F]+")

HeaderPairs = Iterable[Tuple[Union[str, bytes], Union[str, bytes]]]
Headers = Union[Mapping[str, str], HeaderPairs]


def parse_trace_flags(value: str) -> int:
    """
    Parse the trace-flags field as a signed 8-bit hexadecimal integer.

    An optional sign is accepted; a ``0x`` prefix, underscores and whitespace
    are not. Values above ``7f`` overflow the signed range and are rejected.

    Raises:
        TraceFlagsError: if the field is not hex or out of range
    """
    if not _FLAGS_RE.fullmatch(value or ""):
        raise TraceFlagsError("trace-flags is not a hex integer", {"value": value})
    flags = int(value, 16)
    if not _FLAGS_MIN <= flags <= _FLAGS_MAX:
        raise TraceFlagsError("trace-flags out of signed 8-bit range", {"value": value})
    return flags


def parse_traceparent(header_value: Optional[str]) -> Optional[TraceContext]:
    """
    Parse a traceparent header into a TraceContext.

    Only version ``00`` headers with exactly four hyphen-separated fields are
    interpreted. The trace and span ids are taken verbatim. Anything else,
    including a bad trace-flags field, yields None rather than an error.
    """
    fields = (header_value or "").split("-")
    if len(fields) != 4 or fields[0] != SUPPORTED_VERSION:
        return None

    try:
        flags = parse_trace_flags(fields[3])
    except TraceFlagsError:
        return None

    return TraceContext(
        id=fields[1],
        span_id=fields[2],
        sampled=(flags & 1) != 0,
    )


def get_header(headers: Optional[Headers], name: str) -> str:
    """
    Case-insensitive header lookup returning the first match, or "".

    Accepts a mapping (``dict``, Starlette ``Headers``) or an iterable of
    ``(name, value)`` pairs such as ASGI's raw ``scope["headers"]``.
    """
    if not headers:
        return ""
    name = name.lower()
    items: Any = headers.items() if hasattr(headers, "items") else headers
    for key, value in items:
        if isinstance(key, bytes):
            key = key.decode("latin-1")
        if key.lower() != name:
            continue
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return value
    return ""


def extract_traceparent(headers: Optional[Headers]) -> Optional[TraceContext]:
    """
    Extract the traceparent header from ``headers`` and parse it.
    """
    return parse_traceparent(get_header(headers, TRACEPARENT_HEADER))
