"""Retry and polling configuration schema."""
from pydantic import BaseModel, Field, field_validator


class RetryConfig(BaseModel):
    """Polling settings used by resource operations."""

    backoff_seconds: float = Field(1.0, description="Fixed interval between polling attempts")
    read_timeout: float = Field(300.0, description="Deadline for read-after-write polling")
    lookup_timeout: float = Field(15.0, description="Deadline for name lookups")
    delete_timeout: float = Field(30.0, description="Deadline for delete confirmation")

    @field_validator("backoff_seconds")
    @classmethod
    def validate_backoff(cls, v: float) -> float:
        """Validate backoff."""
        if v <= 0:
            raise ValueError("Backoff must be positive")
        return v

    @field_validator("read_timeout", "lookup_timeout", "delete_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeouts."""
        if v < 0:
            raise ValueError("Timeout must be non-negative")
        return v
