"""Domain exceptions.

Services raise these; the application maps each one to an HTTP status in a single
exception handler (see ``lunapm.main``).
"""


class LunaPMError(Exception):
    """Base exception for domain errors."""

    status_code: int = 500
    default_code: str = "LUNAPM_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)


class NotFoundError(LunaPMError):
    """Entity does not exist or failed a scoping check.

    Scoping failures (for example a client portal slug that belongs to a COMPANY
    workspace) use the same error so existence is never leaked.
    """

    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: object | None = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found")


class DomainValidationError(LunaPMError):
    """Request data is incomplete or references entities outside its scope.

    Always raised before anything is written.
    """

    status_code = 422
    default_code = "VALIDATION_ERROR"


class ConstraintViolationError(LunaPMError):
    """A uniqueness or state constraint would be violated."""

    status_code = 409
    default_code = "CONSTRAINT_VIOLATION"


class HierarchyCycleError(ConstraintViolationError):
    """A parent or dependency edge would close a cycle."""

    default_code = "HIERARCHY_CYCLE"

    def __init__(self, message: str = "Change would create a cycle"):
        super().__init__(message)
