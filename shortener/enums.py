"""Shared enums for the link shortener service.

This module defines all status and state enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["HealthStatus", "RequestStatus", "ResolveStatus", "HashStrategy"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DISABLED = "disabled"


class RequestStatus(StrEnum):
    """Request status values for metrics and logging."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    EXHAUSTED = "exhausted"
    ERROR = "error"


class ResolveStatus(StrEnum):
    """Outcome of resolving a hash to its target URL.

    EXPIRED and NOT_FOUND are normal outcomes, not errors.
    """

    OK = "ok"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


class HashStrategy(StrEnum):
    """How a new link's hash is derived."""

    SEQUENTIAL = "sequential"
    RANDOM = "random"
