"""Backup modules for guarded file operations.

Modules:
    transfer: Atomic backup, restore and secure delete primitives
    file_guard: Root-bound entry point with audit logging and results
"""

from .transfer import (
    backup_file,
    restore_file,
    secure_delete,
)

from .file_guard import (
    FileGuard,
    COMMANDS,
)

__all__ = [
    # transfer
    'backup_file',
    'restore_file',
    'secure_delete',
    # file_guard
    'FileGuard',
    'COMMANDS',
]
