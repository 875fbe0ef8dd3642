"""
Domain error taxonomy.

Raised at the point of detection by components and adapters; translated to
HTTP responses in one place (patronage.api.errors).
"""


class DomainError(Exception):
    """Base class for expected domain failures."""

    kind = "domain_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Resource absent, or not owned by the caller."""

    kind = "not_found"


class UnauthorizedError(DomainError):
    """No usable identity on a route that needs one."""

    kind = "unauthorized"


class ForbiddenError(DomainError):
    """Authenticated, but not allowed to act on this resource."""

    kind = "forbidden"


class DomainValidationError(DomainError):
    """Malformed or inconsistent input."""

    kind = "validation_error"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConflictError(DomainError):
    """Uniqueness constraint hit, e.g. a duplicate like under a race."""

    kind = "conflict"


class UpstreamFailureError(DomainError):
    """Backing store unavailable."""

    kind = "upstream_failure"
