"""
Result Values
=============
Tagged success/failure values passed between pipeline stages.

Every component returns a ``Result`` instead of raising, so the failure
kinds a stage can produce are visible at its call site.  Library
exceptions (Playwright, pypdf, OSError) are caught at the component
boundary and converted into a ``Failure`` carrying one ``ErrorKind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure taxonomy for a sitebook run."""
    MISSING_ARGUMENT = "MissingArgument"
    INVALID_ARGUMENT = "InvalidArgument"
    PATTERN_COMPILE_ERROR = "PatternCompileError"
    NAVIGATION_TIMEOUT = "NavigationTimeout"
    NAVIGATION_FAILURE = "NavigationFailure"
    BROWSER_FAILURE = "BrowserFailure"
    RENDER_FAILURE = "RenderFailure"
    ASSEMBLY_FAILURE = "AssemblyFailure"
    FILESYSTEM_ERROR = "FilesystemError"


@dataclass(frozen=True)
class Failure:
    """A failed stage: what went wrong and, when known, for which URL."""
    kind: ErrorKind
    message: str
    url: Optional[str] = None

    def describe(self) -> str:
        where = f" ({self.url})" if self.url else ""
        return f"{self.kind.value}: {self.message}{where}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a ``Failure`` — never both."""
    value: Optional[T] = None
    error: Optional[Failure] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, url: Optional[str] = None
    ) -> "Result[T]":
        return cls(error=Failure(kind=kind, message=message, url=url))

    @classmethod
    def from_failure(cls, failure: Failure) -> "Result[T]":
        return cls(error=failure)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value; raise ``ValueError`` if this is a failure."""
        if self.error is not None:
            raise ValueError(self.error.describe())
        return self.value
