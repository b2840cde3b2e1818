"""Utility modules for common operations.

Modules:
    constants: Filename rules, artifact suffixes, I/O sizes
    path_safety: Filename validation and root containment
    file_ops: Exclusive create, chunked copy, zero overwrite, cleanup
    settings: YAML settings loader
"""

from .path_safety import (
    Filename,
    validate_filename,
    ensure_contained,
    resolve_root,
)

from .file_ops import (
    check_chunk_size,
    open_exclusive,
    sync_file,
    copy_stream,
    overwrite_with_zeros,
    copy_permissions,
    remove_quietly,
)

from .settings import (
    Settings,
    load_settings,
    get_default_settings_path,
)

__all__ = [
    # path_safety
    'Filename',
    'validate_filename',
    'ensure_contained',
    'resolve_root',
    # file_ops
    'check_chunk_size',
    'open_exclusive',
    'sync_file',
    'copy_stream',
    'overwrite_with_zeros',
    'copy_permissions',
    'remove_quietly',
    # settings
    'Settings',
    'load_settings',
    'get_default_settings_path',
]
