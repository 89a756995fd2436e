"""Domain-specific exceptions with user-ready messages for the inventory system."""

from collections.abc import Iterable
from uuid import UUID


class BusinessLogicException(Exception):
    """Base exception class for business logic errors.

    All business logic exceptions include user-ready messages that can be
    displayed directly in the UI without client-side message construction.
    """

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class RecordNotFoundException(BusinessLogicException):
    """Exception raised when a requested record is not found."""

    def __init__(self, resource_type: str, identifier: str | int | UUID) -> None:
        message = f"{resource_type} {identifier} was not found"
        super().__init__(message, error_code="RECORD_NOT_FOUND")


class ComponentPartsNotFoundException(RecordNotFoundException):
    """Exception raised when an assembly references component parts that don't exist."""

    def __init__(self, missing_ids: Iterable[UUID]) -> None:
        self.missing_ids = list(missing_ids)
        joined = ", ".join(str(part_id) for part_id in self.missing_ids)
        BusinessLogicException.__init__(
            self,
            f"Component parts not found with IDs: {joined}",
            error_code="COMPONENT_PARTS_NOT_FOUND",
        )


class ResourceConflictException(BusinessLogicException):
    """Exception raised when attempting to create a resource that already exists."""

    def __init__(self, resource_type: str, identifier: str | int) -> None:
        message = f"A {resource_type.lower()} with {identifier} already exists"
        super().__init__(message, error_code="RESOURCE_CONFLICT")


class DuplicatePartNameException(ResourceConflictException):
    """Exception raised when a part name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        BusinessLogicException.__init__(
            self,
            f'Part with name "{name}" already exists',
            error_code="DUPLICATE_PART_NAME",
        )


class CircularDependencyException(BusinessLogicException):
    """Exception raised when a component edge would make a part require itself."""

    def __init__(self) -> None:
        super().__init__(
            "Circular dependency detected in assembled parts",
            error_code="CIRCULAR_DEPENDENCY",
        )


class InvalidOperationException(BusinessLogicException):
    """Exception raised when an operation cannot be performed due to business rules."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        message = f"Cannot {operation} because {cause}"
        super().__init__(message, error_code="INVALID_OPERATION")
