"""
Core Module
============

Shared core utilities and abstractions used across the application.
"""

from visitor_log.core.exceptions import (
    ApplicationException,
    RepositoryException,
    ValidationException,
    ConfigurationException,
    StartupException,
    ExternalServiceException,
)

__all__ = [
    "ApplicationException",
    "RepositoryException",
    "ValidationException",
    "ConfigurationException",
    "StartupException",
    "ExternalServiceException",
]
