"""
Exception Definitions - Custom exceptions for Doctor Responder
==============================================================

This module defines all custom exceptions used throughout the application,
providing clear error handling and meaningful error messages.
"""


class DoctorError(Exception):
    """
    Base exception for all Doctor Responder errors.

    All custom exceptions in this application inherit from this base class,
    allowing for easy catching of all application-specific errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(DoctorError):
    """
    Configuration-related errors.

    Raised at construction time when there are issues with:
    - Empty fallback lists
    - Rules without decompositions
    - Decompositions without response templates
    - Patterns that do not compile
    - Template placeholders referencing missing capture groups
    - Configuration or rules files that cannot be read or parsed
    """
    pass


class UIError(DoctorError):
    """
    User interface errors.

    Raised when there are issues with:
    - Placeholder hint configuration
    - Terminal UI rendering
    - Web UI template errors
    """
    pass
