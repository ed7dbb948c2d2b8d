"""Core domain primitives."""

from .exceptions import (
    ConfigurationError,
    DomainException,
    RegistrationError,
    ValidationError,
)

__all__ = [
    "DomainException",
    "ValidationError",
    "ConfigurationError",
    "RegistrationError",
]
