"""
Exceptions raised while resolving a ScanImage TIFF series.

Naming violations are recoverable: the session catches them and falls back
to single-file mode. `DirectoryUnreadable` and `UnsupportedFormatError`
abort `SeriesSession.open`.
"""
from __future__ import annotations


class NamingViolation(ValueError):
    """A filename does not follow the ``<prefix>_<suffix>.<ext>`` convention."""

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name


class NoSeparator(NamingViolation):
    def __init__(self, name: str):
        super().__init__(name, f"{name!r} has no '_' separator before the suffix")


class NonIntegerSuffix(NamingViolation):
    def __init__(self, name: str, suffix_text: str):
        super().__init__(
            name, f"{name!r} has a non-integer suffix {suffix_text!r}"
        )
        self.suffix_text = suffix_text


class SuffixMismatch(NamingViolation):
    def __init__(self, name: str, actual: int, expected: int):
        super().__init__(
            name,
            f"{name!r} has suffix {actual}, metadata expects {expected}",
        )
        self.actual = actual
        self.expected = expected


class DirectoryUnreadable(OSError):
    """The directory holding the primary file could not be listed."""


class UnsupportedFormatError(ValueError):
    """The file's comment block carries no ScanImage marker."""
