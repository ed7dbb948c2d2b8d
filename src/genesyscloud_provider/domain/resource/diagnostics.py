"""Diagnostics returned to the declarative engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    """Diagnostic severity."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single human-readable message for the engine."""

    severity: Severity
    summary: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.severity.value}: {self.summary}: {self.detail}"
        return f"{self.severity.value}: {self.summary}"


class Diagnostics(list):
    """List of diagnostics; an empty list means success."""

    @classmethod
    def error(cls, summary: str, detail: str = "") -> "Diagnostics":
        return cls([Diagnostic(Severity.ERROR, summary, detail)])

    @classmethod
    def warning(cls, summary: str, detail: str = "") -> "Diagnostics":
        return cls([Diagnostic(Severity.WARNING, summary, detail)])

    @classmethod
    def from_exception(cls, error: BaseException, summary: Optional[str] = None) -> "Diagnostics":
        """Wrap an exception in an error diagnostic."""
        return cls.error(summary or str(error), detail=str(error) if summary else "")

    def has_error(self) -> bool:
        return any(diag.severity == Severity.ERROR for diag in self)

    def errors(self) -> "Diagnostics":
        return Diagnostics(diag for diag in self if diag.severity == Severity.ERROR)
