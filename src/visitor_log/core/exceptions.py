"""
Core Exceptions
================

Custom exceptions for the application.

These exceptions are raised by the infrastructure and application layers and
translated into HTTP responses or process exit at the boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class StartupException(ApplicationException):
    """Exception raised when a startup stage fails."""

    def __init__(self, stage: str, message: str, details: Optional[dict] = None):
        self.stage = stage
        super().__init__(f"Startup stage '{stage}' failed: {message}", details)


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)
