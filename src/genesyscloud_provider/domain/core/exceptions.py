# src/genesyscloud_provider/domain/core/exceptions.py
from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""
    pass


class ValidationError(DomainException):
    """Raised when declared resource configuration fails validation."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class ResourceValidationError(ValidationError):
    """Raised when a resource's declared configuration is invalid."""
    def __init__(self, resource_type: str, errors: Dict[str, str]):
        summary = "; ".join(f"{field}: {error}" for field, error in errors.items())
        super().__init__(f"Invalid configuration for {resource_type}: {summary}", errors)
        self.resource_type = resource_type
        self.errors = errors


class ConfigurationError(DomainException):
    """Raised when there's an issue with configuration."""
    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class RegistrationError(DomainException):
    """Raised when resource registration is invalid or attempted after freeze."""
    pass
