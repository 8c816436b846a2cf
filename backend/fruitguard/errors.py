"""Failure kinds raised by the analysis relay.

Each kind maps to one HTTP status and one short, user-safe message. Raw
upstream output never travels inside these exceptions; it is logged where the
failure is detected.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fruitguard.models import ErrorResult


class RelayError(Exception):
    """Base class for every failure the relay reports to its caller."""

    kind: str = "RelayError"
    status_code: int = 500
    default_message: str = "Failed to analyze image"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return ErrorResult(error=self.message).model_dump()


class InvalidInput(RelayError):
    kind = "InvalidInput"
    status_code = 400
    default_message = "No image provided"


class Unauthorized(RelayError):
    kind = "Unauthorized"
    status_code = 401
    default_message = "Unauthorized"


class Misconfigured(RelayError):
    kind = "Misconfigured"
    status_code = 500
    default_message = "AI_GATEWAY_API_KEY is not configured"


class RateLimited(RelayError):
    kind = "RateLimited"
    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class UpstreamUnavailable(RelayError):
    kind = "UpstreamUnavailable"
    status_code = 402
    default_message = "Service temporarily unavailable. Please try again later."


class UpstreamError(RelayError):
    kind = "UpstreamError"
    status_code = 500
    default_message = "AI gateway error"

    def __init__(self, upstream_status: Optional[int] = None, message: Optional[str] = None) -> None:
        self.upstream_status = upstream_status
        if message is None and upstream_status is not None:
            message = f"AI gateway error: {upstream_status}"
        super().__init__(message)


class EmptyUpstreamResponse(RelayError):
    kind = "EmptyUpstreamResponse"
    status_code = 500
    default_message = "No response from AI"


class MalformedUpstreamPayload(RelayError):
    kind = "MalformedUpstreamPayload"
    status_code = 500
    default_message = "Failed to parse analysis results"


__all__ = [
    "RelayError",
    "InvalidInput",
    "Unauthorized",
    "Misconfigured",
    "RateLimited",
    "UpstreamUnavailable",
    "UpstreamError",
    "EmptyUpstreamResponse",
    "MalformedUpstreamPayload",
]
