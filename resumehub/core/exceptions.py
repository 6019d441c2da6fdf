"""
Custom Exceptions

Request-facing errors are HTTPException subclasses so FastAPI turns them into
responses directly. Core errors that are not tied to HTTP (backing-store
failures, caller contract violations) are plain exceptions; main.py maps
InfrastructureError to 503.
"""
from fastapi import HTTPException, status


class InfrastructureError(Exception):
    """
    A backing service (database, cache) failed.

    Never used for "not found": a missing tenant or resume is a normal empty
    result. Callers must not retry or substitute a cached value.
    """


class PreconditionError(Exception):
    """A caller broke a function's contract, e.g. passed None where a resume is required."""


class TenantNotFoundError(HTTPException):
    """Raised when tenant cannot be found."""

    def __init__(self, tenant_identifier: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant not found: {tenant_identifier}" if tenant_identifier else "Tenant not found"
        )


class ResumeNotFoundError(HTTPException):
    """Raised when a resume cannot be found in the current tenant."""

    def __init__(self, resume_id: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resume not found: {resume_id}" if resume_id else "Resume not found"
        )


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AccountLockedError(HTTPException):
    """Raised when a login is attempted on a locked account."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Account temporarily locked due to too many failed login attempts.",
            headers={"Retry-After": str(retry_after)}
        )


class TenantIsolationError(HTTPException):
    """
    Raised when a tenant isolation violation is detected.

    This is a security error and is logged as a security event.
    """

    def __init__(self, detail: str = "Tenant isolation violation"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class RateLimitExceeded(HTTPException):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many attempts. Please try again later.",
            headers={"Retry-After": str(retry_after)}
        )
