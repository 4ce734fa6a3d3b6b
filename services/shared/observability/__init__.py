"""
Shared observability helpers (telemetry, request correlation, audit fingerprints).

Services import from this package to enable consistent instrumentation and
structured logging.
"""

from .fingerprint import hash_payload
from .telemetry import (
    CORRELATION_ID_HEADER,
    RequestContextToken,
    bind_request_context,
    current_request_id,
    ensure_request_id,
    reset_request_context,
    setup_telemetry,
)

__all__ = [
    "hash_payload",
    "CORRELATION_ID_HEADER",
    "RequestContextToken",
    "bind_request_context",
    "current_request_id",
    "ensure_request_id",
    "reset_request_context",
    "setup_telemetry",
]
