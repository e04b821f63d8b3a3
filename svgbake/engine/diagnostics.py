"""Severity-tagged diagnostics for engine operations.

Degenerate-but-legal input (a zero-width viewBox, an unknown transform
function, an arc with a zero radius) never raises: the operation falls back to
a safe result and records a :class:`Diagnostic`. Callers decide whether to
reject, ignore or propagate what was collected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class TransformInputError(ValueError):
    """A required input is missing or malformed."""


class Severity(str, Enum):
    FATAL = "fatal"
    DEGENERATE = "degenerate"
    INFORMATIONAL = "informational"


_LOG_LEVELS = {
    Severity.FATAL: logging.ERROR,
    Severity.DEGENERATE: logging.WARNING,
    Severity.INFORMATIONAL: logging.DEBUG,
}


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    source: str  # engine function that produced it
    message: str


@dataclass
class Diagnostics:
    """Append-only collector passed through engine calls."""

    items: list[Diagnostic] = field(default_factory=list)

    def add(self, severity: Severity, source: str, message: str) -> Diagnostic:
        diagnostic = Diagnostic(severity=severity, source=source, message=message)
        self.items.append(diagnostic)
        logger.log(_LOG_LEVELS[severity], "%s: %s", source, message)
        return diagnostic

    def fatal(self, source: str, message: str) -> Diagnostic:
        return self.add(Severity.FATAL, source, message)

    def degenerate(self, source: str, message: str) -> Diagnostic:
        return self.add(Severity.DEGENERATE, source, message)

    def info(self, source: str, message: str) -> Diagnostic:
        return self.add(Severity.INFORMATIONAL, source, message)

    def extend(self, other: Diagnostics) -> None:
        self.items.extend(other.items)

    def by_severity(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self.items if d.severity == severity]

    @property
    def has_fatal(self) -> bool:
        return any(d.severity == Severity.FATAL for d in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


def ensure(diagnostics: Diagnostics | None) -> Diagnostics:
    """Return ``diagnostics`` or a throwaway collector when none was given."""
    return diagnostics if diagnostics is not None else Diagnostics()
