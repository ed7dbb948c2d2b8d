"""Logging configuration schema."""
from pydantic import BaseModel, Field, field_validator


class LogFileConfig(BaseModel):
    """Rotating log file settings."""

    path: str = Field("genesyscloud-provider.log", description="Log file path")
    max_size_mb: int = Field(10, description="Maximum size of one log file in MB")
    backup_count: int = Field(5, description="Number of rotated files to keep")

    @field_validator("max_size_mb", "backup_count")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    destination: str = Field("stdout", description="Log destination: file, stdout or both")
    format: str = Field("console", description="Renderer: console or json")
    file: LogFileConfig = Field(default_factory=LogFileConfig)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        """Validate log destination."""
        valid_destinations = ["file", "stdout", "both"]
        if v.lower() not in valid_destinations:
            raise ValueError(f"Log destination must be one of {valid_destinations}")
        return v.lower()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("console", "json"):
            raise ValueError("Log format must be one of ['console', 'json']")
        return v.lower()
