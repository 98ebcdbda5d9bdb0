"""
Platform-wide exception hierarchy.

Services raise these; blueprints register one handler per type and map them
to HTTP status codes. The message of every exception is the exact text the
form shows under its error title, so handlers pass ``str(error)`` through
unchanged.

Usage:
    from groupadmin.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Host group", resource_id=42)
    raise ValidationError('Invalid parameter "/1/name": invalid host group name.')
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Host group").
        resource_id: The key that was looked up. Logged, never shown to users.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__("No permissions to referred object or it does not exist!")


class FormError(Exception):
    """Raised when a submitted form field fails a static check.

    Form errors are reported before the request ever reaches the service
    layer and carry the "Page received incorrect data" title. Maps to HTTP 400.

    Args:
        field: Form label of the offending field (e.g. "Group name").
        reason: Short reason, e.g. "cannot be empty".
    """

    title = "Page received incorrect data"

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f'Incorrect value for field "{field}": {reason}.')


class ValidationError(Exception):
    """Raised when input fails a business rule in the service layer.

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a write would duplicate a unique name.

    Maps to HTTP 409.

    Args:
        resource: Entity name as shown to users (e.g. "Host group").
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f'{resource} "{value}" already exists.')


class ReferentialIntegrityError(Exception):
    """Raised when a delete is blocked by a record that still needs the resource.

    Only the first blocking dependent is reported. Maps to HTTP 409.

    Args:
        message: Human-readable explanation naming the blocking dependent.
        dependent_type: Kind of blocking record (e.g. "host", "script").
        dependent_name: Name of the blocking record.
    """

    def __init__(self, message: str, dependent_type: str, dependent_name: str) -> None:
        self.dependent_type = dependent_type
        self.dependent_name = dependent_name
        super().__init__(message)
