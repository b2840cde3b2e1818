"""Atomic transfer engine: backup, restore and secure delete.

Every operation validates the filename, confines each path it touches
(the file, ``<name>.bak``, ``<name>.tmp``) to the root directory, and only
then calls into the filesystem.

Guarantees:
    backup_file:   never overwrites an existing ``.bak``; the artifact is
                   created exclusively and removed again if the copy fails
    restore_file:  writes into an exclusively created ``.tmp`` and renames
                   it over the target, so the target is either untouched or
                   fully replaced; the ``.tmp`` never outlives the call
    secure_delete: overwrites exactly the current length with zeros, then
                   removes the file

Secure delete is best effort. On copy-on-write filesystems, SSDs with wear
levelling, snapshots, or any store that does not overwrite in place, the
old bytes may survive on the medium.

No operation retries; every filesystem error is raised to the caller.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Optional, Union

from ..errors import (
    AlreadyExistsError,
    IoFailureError,
    NotFoundError,
    NotRegularFileError,
)
from ..utils.constants import CHUNK_SIZE
from ..utils.file_ops import (
    check_chunk_size,
    copy_permissions,
    copy_stream,
    open_exclusive,
    overwrite_with_zeros,
    remove_quietly,
)
from ..utils.path_safety import Filename, ensure_contained, validate_filename

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _stat_or_none(path: Path, step: str) -> Optional[os.stat_result]:
    """Stat ``path``, returning None when it does not exist.

    Any other failure (e.g. ENAMETOOLONG on a derived ``.bak`` name) is
    raised as ``IoFailureError``.
    """
    try:
        return os.stat(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise IoFailureError(f"inspect {path.name}", cause=e, path=path, step=step) from e


def _require_regular_file(path: Path, missing: str, step: str) -> None:
    """Raise unless ``path`` exists and is a regular file."""
    st = _stat_or_none(path, step)
    if st is None:
        raise NotFoundError(missing, path=path, step=step)
    if not stat.S_ISREG(st.st_mode):
        raise NotRegularFileError(f"not a regular file: {path.name}", path=path, step=step)


def backup_file(
    root: PathLike,
    name: Union[str, Filename],
    chunk_size: int = CHUNK_SIZE,
    fsync: bool = True
) -> Path:
    """Copy ``<name>`` to a new ``<name>.bak`` in the root directory.

    Args:
        root: Directory the operation is confined to
        name: Raw or validated filename
        chunk_size: Copy buffer size
        fsync: Whether to fsync the backup before returning

    Returns:
        Path to the new backup artifact

    Raises:
        InvalidNameError: If ``name`` fails validation
        PathTraversalError: If a derived path escapes the root
        NotFoundError: If the source file does not exist
        NotRegularFileError: If the source is not a regular file
        AlreadyExistsError: If a backup already exists (or appears concurrently)
        IoFailureError: If opening, copying or flushing fails
        ValueError: If ``chunk_size`` is not positive
    """
    filename = validate_filename(name)
    source = ensure_contained(root, filename)
    backup = ensure_contained(root, filename.backup_name)

    check_chunk_size(chunk_size)
    _require_regular_file(source, "source file does not exist", step="check-source")

    # lexists: a dangling symlink named like the backup still blocks it
    if os.path.lexists(backup):
        raise AlreadyExistsError(
            "backup already exists, refusing to overwrite", path=backup, step="check-backup"
        )

    try:
        reader = open(source, "rb")
    except OSError as e:
        raise IoFailureError(f"open source {source.name}", cause=e, path=source, step="open-source") from e

    with reader:
        try:
            writer = open_exclusive(backup)
        except FileExistsError as e:
            raise AlreadyExistsError(
                "backup already exists, refusing to overwrite", path=backup, step="create-backup"
            ) from e
        except OSError as e:
            raise IoFailureError(f"create backup {backup.name}", cause=e, path=backup, step="create-backup") from e

        complete = False
        try:
            with writer:
                copy_stream(reader, writer, chunk_size=chunk_size, fsync=fsync)
            complete = True
        except OSError as e:
            raise IoFailureError("copy to backup failed", cause=e, path=backup, step="copy") from e
        finally:
            # Only this call created the artifact, so a partial one is ours to remove
            if not complete:
                remove_quietly(backup)

    logger.debug("Backed up %s -> %s", source, backup)
    return backup


def restore_file(
    root: PathLike,
    name: Union[str, Filename],
    chunk_size: int = CHUNK_SIZE,
    fsync: bool = True
) -> Path:
    """Replace ``<name>`` with the contents of ``<name>.bak``.

    The backup is copied into ``<name>.tmp``, flushed, and renamed over
    ``<name>`` with ``os.replace``. On any failure after the temp file is
    created it is removed and the target keeps its previous contents.
    The backup itself is left in place.

    Args:
        root: Directory the operation is confined to
        name: Raw or validated filename
        chunk_size: Copy buffer size
        fsync: Whether to fsync the temp file before renaming

    Returns:
        Path to the restored file

    Raises:
        InvalidNameError: If ``name`` fails validation
        PathTraversalError: If a derived path escapes the root
        NotFoundError: If there is no backup (no temp file is created)
        NotRegularFileError: If the backup or the target is not a regular file
        AlreadyExistsError: If a temp file from another restore exists
        IoFailureError: If copying or renaming fails
        ValueError: If ``chunk_size`` is not positive
    """
    filename = validate_filename(name)
    target = ensure_contained(root, filename)
    backup = ensure_contained(root, filename.backup_name)
    temp = ensure_contained(root, filename.temp_name)

    check_chunk_size(chunk_size)
    _require_regular_file(backup, "backup file does not exist", step="check-backup")

    target_stat = _stat_or_none(target, "check-target")
    if target_stat is not None and not stat.S_ISREG(target_stat.st_mode):
        raise NotRegularFileError(f"not a regular file: {target.name}", path=target, step="check-target")

    try:
        reader = open(backup, "rb")
    except OSError as e:
        raise IoFailureError(f"open backup {backup.name}", cause=e, path=backup, step="open-backup") from e

    with reader:
        try:
            writer = open_exclusive(temp)
        except FileExistsError as e:
            # Not ours: another restore may own it, so leave it alone
            raise AlreadyExistsError(
                "temporary file already exists, another restore may be in progress",
                path=temp,
                step="create-temp",
            ) from e
        except OSError as e:
            raise IoFailureError(f"create temp {temp.name}", cause=e, path=temp, step="create-temp") from e

        committed = False
        step = "copy"
        try:
            with writer:
                copy_stream(reader, writer, chunk_size=chunk_size, fsync=fsync)

            if target_stat is not None:
                copy_permissions(target, temp)

            step = "rename"
            os.replace(temp, target)
            committed = True
        except OSError as e:
            what = "copy from backup failed" if step == "copy" else f"rename {temp.name} to {target.name}"
            raise IoFailureError(what, cause=e, path=temp, step=step) from e
        finally:
            if not committed:
                remove_quietly(temp)

    logger.debug("Restored %s from %s", target, backup)
    return target


def secure_delete(
    root: PathLike,
    name: Union[str, Filename],
    chunk_size: int = CHUNK_SIZE,
    fsync: bool = True
) -> int:
    """Overwrite ``<name>`` with zeros, then remove it.

    The file is opened without truncation and its current length is
    overwritten in ``chunk_size`` pieces, so peak memory is one chunk.

    Args:
        root: Directory the operation is confined to
        name: Raw or validated filename
        chunk_size: Zero buffer size
        fsync: Whether to fsync the zeros before removing

    Returns:
        Number of bytes overwritten

    Raises:
        InvalidNameError: If ``name`` fails validation
        PathTraversalError: If the path escapes the root
        NotFoundError: If the file does not exist
        NotRegularFileError: If the path is not a regular file
        IoFailureError: If overwriting or removing fails
        ValueError: If ``chunk_size`` is not positive
    """
    filename = validate_filename(name)
    path = ensure_contained(root, filename)

    check_chunk_size(chunk_size)
    _require_regular_file(path, "file does not exist", step="check-file")

    try:
        length = path.stat().st_size
        with open(path, "r+b") as f:
            written = overwrite_with_zeros(f, length, chunk_size=chunk_size, fsync=fsync)
    except OSError as e:
        raise IoFailureError(f"overwrite {path.name}", cause=e, path=path, step="overwrite") from e

    try:
        os.remove(path)
    except OSError as e:
        raise IoFailureError(f"remove {path.name}", cause=e, path=path, step="remove") from e

    logger.debug("Overwrote %d bytes and removed %s", written, path)
    return written
