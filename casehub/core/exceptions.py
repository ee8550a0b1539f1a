"""
Application-wide exception hierarchy.

Services raise these; blueprints register handlers against them once and
get consistent HTTP status codes everywhere:

    ValidationError  → 400
    NotFoundError    → 404
    ConflictError    → 409  (RunLockedError is a ConflictError)

Usage:
    from casehub.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Test case", resource_id=42)
    raise ValidationError("Name is required", details={"name": "required"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Test run").
        resource_id: The id that was looked up. Included in logs, not in HTTP response.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ValidationError(Exception):
    """Raised when input is missing or malformed. No mutation has happened.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a business rule blocks the operation.

    Examples: deleting a project that still owns test cases, creating a
    duplicate Jira link or folder name.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class RunLockedError(ConflictError):
    """Raised when step edits target a run whose status is passed/failed."""

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(
            f"Test run is {status} and locked. Only the status can be changed."
        )
