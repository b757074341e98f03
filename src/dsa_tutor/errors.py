"""
Custom exceptions for the tutor core.
"""


class TutorError(Exception):
    """Base exception for all tutor exceptions."""
    pass


class ValidationError(TutorError):
    """Raised when required input is missing or malformed."""
    pass


class NotFoundError(TutorError):
    """Raised when a problem, progress record or schedule day does not exist."""
    pass


class EmptyCatalogError(TutorError):
    """Raised when a plan is requested before any problems are imported."""
    pass


class ConflictError(TutorError):
    """Raised when a concurrent writer holds the database; safe to retry."""
    pass
