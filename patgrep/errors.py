"""Exception taxonomy for patgrep.

  - ``DuplicateNameError``:  a category name was registered twice. Registry
                             construction error, fatal at import time.
  - ``UnknownPatternError``: a caller asked for a category that does not exist,
                             or supplied a custom pattern that cannot be used.
                             Raised before any match is produced.
  - ``PatternError``:        a combinator or registration received an invalid
                             grammar (bad bounds, empty-matching pattern, ...).

Stream read errors are never wrapped; they propagate from the source object.
"""

from __future__ import annotations

from typing import Optional


class PatgrepError(Exception):
    """Base class for all patgrep errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DuplicateNameError(PatgrepError):
    """Raised when ``PatternRegistry.register()`` sees a name a second time."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Pattern already registered: {name!r}")
        self.name = name


class UnknownPatternError(PatgrepError):
    """Raised for unregistered category names and unusable custom patterns.

    CLI mapping: exit status 2, nothing written to stdout.
    """

    def __init__(self, name: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Unknown pattern: {name!r}")
        self.name = name


class PatternError(PatgrepError, ValueError):
    """Raised when a pattern definition or combinator call is invalid."""
