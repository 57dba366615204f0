"""Advisory classification of upstream error messages.

Upstream providers report failures as opaque strings. classify_error()
maps known substrings to an ErrorCode; the result is metadata for the
UI and for alerting, not a typed exception hierarchy.
"""

from enum import StrEnum


class ErrorCode(StrEnum):
    CREDIT_EXHAUSTED = "openrouter_credits_exhausted"
    RATE_LIMITED = "openrouter_rate_limited"
    QUOTA_EXCEEDED = "openrouter_quota_exceeded"
    TIMEOUT = "timeout"
    AUTH_ERROR = "auth_error"
    UNKNOWN = "unknown"


# Checked in order; first match wins.
_PATTERNS: tuple[tuple[ErrorCode, tuple[str, ...]], ...] = (
    (
        ErrorCode.CREDIT_EXHAUSTED,
        ("insufficient credits", "credit balance", "no credits"),
    ),
    (ErrorCode.RATE_LIMITED, ("rate limit", "rate-limit", "too many requests")),
    (ErrorCode.QUOTA_EXCEEDED, ("quota", "limit exceeded")),
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.AUTH_ERROR, ("401", "unauthorized", "auth")),
)


def classify_error(message: str) -> ErrorCode:
    """Classify a raw upstream error message (case-insensitive)."""
    lowered = message.lower()
    for code, needles in _PATTERNS:
        if any(needle in lowered for needle in needles):
            return code
    return ErrorCode.UNKNOWN
