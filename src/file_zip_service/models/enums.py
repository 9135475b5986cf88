from __future__ import annotations

from enum import Enum


class RequestStage(str, Enum):
    """Lifecycle stages of one download request."""

    RECEIVED = "received"
    PARSING = "parsing"
    PARSE_FAILED = "parse_failed"  # Terminal.
    PARSED = "parsed"
    BUILDING = "building"
    BUILD_FAILED = "build_failed"  # Terminal.
    BUILT = "built"
    RESPONSE_SENT = "response_sent"  # Terminal.
