"""Error types raised by SafeBackup operations.

Every failure carries a ``kind`` so callers can branch on the category
instead of parsing messages, plus the ``path`` and ``step`` that failed.

Kinds:
    InvalidName: the filename was rejected by the validator
    PathEscape: a path resolved outside the root directory
    NotFound: the source file or backup is missing
    NotRegularFile: the path exists but is not a regular file
    AlreadyExists: a backup (or in-flight temp file) is already present
    IoFailure: a copy, write, rename or remove call failed
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""

    INVALID_NAME = "InvalidName"
    PATH_ESCAPE = "PathEscape"
    NOT_FOUND = "NotFound"
    NOT_REGULAR_FILE = "NotRegularFile"
    ALREADY_EXISTS = "AlreadyExists"
    IO_FAILURE = "IoFailure"
    SETTINGS = "Settings"


class NameRejection(str, Enum):
    """Reasons the filename validator can reject an input."""

    EMPTY = "empty"
    TOO_LONG = "too_long"
    SEPARATOR = "separator"
    TRAVERSAL = "traversal"
    INVALID_CHARACTERS = "invalid_characters"
    MISSING_EXTENSION = "missing_extension"
    EXTENSION_NOT_ALLOWED = "extension_not_allowed"


class SafeBackupError(Exception):
    """Base class for all SafeBackup failures.

    Attributes:
        kind: The failure category
        path: The path involved, when known
        step: Short name of the step that failed (e.g. "create-backup")
    """

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        step: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None
        self.step = step


class InvalidNameError(SafeBackupError, ValueError):
    """Raised when a filename fails validation."""

    kind = ErrorKind.INVALID_NAME

    def __init__(self, message: str, reason: NameRejection, path: Optional[str] = None):
        super().__init__(message, path=path, step="validate")
        self.reason = reason


class PathTraversalError(SafeBackupError, ValueError):
    """Raised when a path would escape the root directory."""

    kind = ErrorKind.PATH_ESCAPE


class NotFoundError(SafeBackupError):
    """Raised when a required source or backup file is missing."""

    kind = ErrorKind.NOT_FOUND


class NotRegularFileError(SafeBackupError):
    """Raised when a path exists but is a directory, device, etc."""

    kind = ErrorKind.NOT_REGULAR_FILE


class AlreadyExistsError(SafeBackupError):
    """Raised instead of overwriting an existing artifact."""

    kind = ErrorKind.ALREADY_EXISTS


class IoFailureError(SafeBackupError):
    """Raised when a filesystem call fails mid-operation.

    The underlying ``OSError`` is kept as ``cause`` (and chained as
    ``__cause__`` by the raiser).
    """

    kind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        path: Optional[Union[str, Path]] = None,
        step: Optional[str] = None
    ):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, path=path, step=step)
        self.cause = cause


class SettingsError(SafeBackupError, ValueError):
    """Raised when the settings file is unreadable or invalid."""

    kind = ErrorKind.SETTINGS
