"""SafeBackup: guarded backup, restore and secure delete for a single directory.

Subpackages:
    utils: Filename validation, containment, low-level file primitives, settings
    backup: Transfer engine and the root-bound FileGuard
    output: Append-only audit trail
"""

from .errors import (
    ErrorKind,
    NameRejection,
    SafeBackupError,
    InvalidNameError,
    PathTraversalError,
    NotFoundError,
    NotRegularFileError,
    AlreadyExistsError,
    IoFailureError,
    SettingsError,
)
from .utils.path_safety import Filename, validate_filename, ensure_contained
from .backup import FileGuard, backup_file, restore_file, secure_delete

__version__ = "1.0.0"

__all__ = [
    'ErrorKind',
    'NameRejection',
    'SafeBackupError',
    'InvalidNameError',
    'PathTraversalError',
    'NotFoundError',
    'NotRegularFileError',
    'AlreadyExistsError',
    'IoFailureError',
    'SettingsError',
    'Filename',
    'validate_filename',
    'ensure_contained',
    'FileGuard',
    'backup_file',
    'restore_file',
    'secure_delete',
    '__version__',
]
