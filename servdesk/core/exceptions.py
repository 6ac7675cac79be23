"""Error taxonomy for the knowledge-base engine.

Every error carries the HTTP status it surfaces as; the mapping to responses lives
in servdesk.main. Permission primitives never raise; these are raised by the
service layer after a primitive returns False.
"""

from collections.abc import Iterable

from servdesk.models.user import Role
from servdesk.services.policy import required_roles_message, role_names


class ServDeskError(Exception):
    """Base exception for ServDesk."""

    status_code = 500

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class UnauthenticatedError(ServDeskError):
    """Raised when no valid session is present."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized: Not authenticated") -> None:
        super().__init__(message)


class AccountDisabledError(ServDeskError):
    """Raised when the session belongs to a deactivated account."""

    status_code = 403

    def __init__(self, message: str = "Unauthorized: Account is disabled") -> None:
        super().__init__(message)


class ForbiddenError(ServDeskError):
    """Raised when an authenticated actor lacks every one of the required roles."""

    status_code = 403

    def __init__(self, required_roles: Iterable[Role], action: str | None = None) -> None:
        required = frozenset(required_roles)
        self.required_roles = tuple(role_names(required))
        what = f" to {action}" if action else ""
        if not required:
            super().__init__(f"Forbidden: no role is allowed{what}")
            return
        super().__init__(f"Forbidden: requires {required_roles_message(required)}{what}")


class NotFoundError(ServDeskError):
    """Raised when an entity is absent or not visible to the actor (indistinguishable)."""

    status_code = 404

    def __init__(self, entity: str = "Resource") -> None:
        super().__init__(f"{entity} not found")


class ValidationFailedError(ServDeskError):
    """Raised when field constraints fail or a referenced category/tag does not exist."""

    status_code = 400

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = ", ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Validation failed: {detail}")


class ConflictError(ServDeskError):
    """Raised when a uniqueness constraint (name, slug) would be violated."""

    status_code = 409


class CircularReferenceError(ConflictError):
    """Raised when a category parent assignment would create a cycle."""

    status_code = 400

    def __init__(self, message: str = "Cannot set parent: would create circular reference") -> None:
        super().__init__(message)
