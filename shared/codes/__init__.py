"""
Shared business codes used across layers (Domain/Core/gRPC).

This package exposes BusinessCode at `shared.codes` as the single source of
truth for error classification; the gRPC layer maps these codes to status
codes in one place.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """Unified business status codes (single source of truth)."""

    # Parameter errors (1xxxx)
    PARAM_MISSING = 10001
    PARAM_VALIDATION_ERROR = 10003

    # Business errors (2xxxx)
    STAFF_MEMBER_NOT_FOUND = 20001
    STAFF_MEMBER_ALREADY_EXISTS = 20002
    TOKEN_EXPIRED = 20005

    # Authorization errors (3xxxx)
    UNAUTHORIZED = 30001

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    DATABASE_ERROR = 40001


__all__ = ["BusinessCode"]
