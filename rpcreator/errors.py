"""Exception hierarchy for the project creator.

Expected per-line problems (malformed entries, unknown categories) are not
raised to callers of the loaders; they are collected as warnings on the
returned objects.  The exceptions below are raised by the lower-level
helpers and by operations that cannot produce a usable result.
"""

from __future__ import annotations


class RpcError(Exception):
    """Base class for all project creator errors."""


class NotFoundError(RpcError, FileNotFoundError):
    """Raised when a configuration file to load does not exist."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class CapacityExceededError(RpcError):
    """Raised when a new key is added to a store that is already full."""

    def __init__(self, key: str, capacity: int) -> None:
        self.key = key
        self.capacity = capacity
        super().__init__(f"Cannot add '{key}': store is full ({capacity} entries)")


class MalformedEntryError(RpcError, ValueError):
    """Raised when a line cannot be parsed as a comment or an entry."""

    def __init__(self, line_no: int, line: str, reason: str = "") -> None:
        self.line_no = line_no
        self.line = line
        detail = f": {reason}" if reason else ""
        super().__init__(f"Line {line_no}: malformed entry {line!r}{detail}")


class UnknownCategoryError(RpcError, ValueError):
    """Raised when a key does not start with a known category prefix."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown category for key '{key}'")


class TemplateMissingError(RpcError, FileNotFoundError):
    """Raised when the template root lacks a required directory or file."""

    def __init__(self, template_dir: object, missing: list[str]) -> None:
        self.template_dir = template_dir
        self.missing = missing
        super().__init__(
            f"Template directory {template_dir} is missing: {', '.join(missing)}"
        )


class GenerationError(RpcError):
    """Raised when a generation step fails irrecoverably."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"Step '{step}': {message}")
