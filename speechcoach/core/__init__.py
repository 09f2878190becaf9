"""
Core Package - Speech Coach Scoring Engine
speechcoach/core/__init__.py

Core infrastructure: exceptions, logging setup.
Dependency getters live in speechcoach.core.dependencies.
"""

from speechcoach.core.exceptions import (
    AIResponseParseError,
    DatabaseConnectionException,
    DividerValidationError,
    DuplicateEntityException,
    EntityNotFoundException,
    RepositoryException,
)

__all__ = [
    "AIResponseParseError",
    "DatabaseConnectionException",
    "DividerValidationError",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "RepositoryException",
]
