"""
Custom Exceptions - Speech Coach Scoring Engine
speechcoach/core/exceptions.py

Exception classes for repository operations and scoring input validation.
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class EntityNotFoundException(RepositoryException):
    """Entity not found in database."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


class DividerValidationError(ValueError):
    """Rejected divider value. Raised before anything is written."""

    NOT_A_NUMBER = "Divider must be a valid number"
    NOT_POSITIVE = "Divider must be greater than zero"

    def __init__(self, message: str, value=None):
        self.message = message
        self.value = value
        super().__init__(message)


class AIResponseParseError(ValueError):
    """Raw AI model output could not be turned into an analysis object."""

    def __init__(self, message: str = "Could not parse AI analysis response"):
        self.message = message
        super().__init__(message)
