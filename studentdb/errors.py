from __future__ import annotations

from pathlib import Path


# ==================================================
# Error Taxonomy
# ==================================================


class StudentDbError(Exception):
    """
    Base error type for studentdb.

    Driver errors raised by sqlite3 are not wrapped; they propagate unchanged.
    """


class DatabaseFileNotFoundError(StudentDbError, FileNotFoundError):
    """
    Raised when an operation expects the database file to exist but it does not.
    """

    def __init__(self, path: Path | str, action: str) -> None:
        self.path = Path(path)
        self.action = action
        super().__init__(f"No database file existed by the name of {self.path}; failed to {action}.")


class ParameterBindingError(StudentDbError, ValueError):
    """
    Raised when a command parameter cannot be bound to its declared type.
    """

    def __init__(self, name: str, message: str) -> None:
        self.parameter_name = name
        super().__init__(f"Parameter '{name}': {message}")


class QueryResourceNotFoundError(StudentDbError, LookupError):
    """
    Raised when a bundled query resource does not exist.
    """

    def __init__(self, resource_name: str) -> None:
        self.resource_name = resource_name
        super().__init__(f"No bundled query resource named '{resource_name}'.")


class ResourceClosedError(StudentDbError, RuntimeError):
    """
    Raised when a closed executor or result reader is used.
    """
