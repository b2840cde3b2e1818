"""Low-level file primitives used by the transfer engine.

Handles the pieces every operation needs:
- Exclusive creation (fail if the target already exists)
- Chunked stream copies with an optional fsync
- Zero overwrites in fixed-size chunks
- Best-effort cleanup of files this process created

Nothing here validates names or checks containment; callers pass paths
that have already been through ``utils.path_safety``.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO

from .constants import CHUNK_SIZE, FILE_MODE

logger = logging.getLogger(__name__)


def check_chunk_size(chunk_size: int) -> None:
    """Raise ``ValueError`` unless ``chunk_size`` is a positive integer."""
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")


def open_exclusive(path: Path, mode: int = FILE_MODE) -> BinaryIO:
    """Create ``path`` for binary writing, failing if it already exists.

    Uses O_CREAT | O_EXCL so a file created concurrently by another process
    between an existence check and this call is detected.

    Args:
        path: File to create
        mode: Permission bits for the new file (subject to umask)

    Returns:
        An open binary file object

    Raises:
        FileExistsError: If ``path`` already exists
        OSError: For any other creation failure
    """
    flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
    fd = os.open(path, flags, mode)
    try:
        return os.fdopen(fd, "wb")
    except Exception:
        os.close(fd)
        raise


def sync_file(f: BinaryIO, fsync: bool = True) -> None:
    """Flush Python buffers and, optionally, the OS cache to disk."""
    f.flush()
    if fsync:
        os.fsync(f.fileno())


def copy_stream(
    src: BinaryIO,
    dst: BinaryIO,
    chunk_size: int = CHUNK_SIZE,
    fsync: bool = True
) -> None:
    """Copy every byte from ``src`` to ``dst`` and flush ``dst``.

    Memory use is bounded by ``chunk_size`` regardless of file size.
    """
    check_chunk_size(chunk_size)
    shutil.copyfileobj(src, dst, chunk_size)
    sync_file(dst, fsync=fsync)


def overwrite_with_zeros(
    f: BinaryIO,
    length: int,
    chunk_size: int = CHUNK_SIZE,
    fsync: bool = True
) -> int:
    """Overwrite the first ``length`` bytes of an open file with zeros.

    Writes from the start of the file in ``chunk_size`` pieces; the last
    piece is shortened so exactly ``length`` bytes are written.

    Args:
        f: File opened for writing without truncation (mode "r+b")
        length: Number of bytes to overwrite
        chunk_size: Size of the zero buffer
        fsync: Whether to fsync after the final write

    Returns:
        Number of bytes written

    Raises:
        ValueError: If ``chunk_size`` is not positive
    """
    check_chunk_size(chunk_size)
    zeros = bytes(chunk_size)
    view = memoryview(zeros)
    written = 0

    f.seek(0)
    while written < length:
        to_write = min(chunk_size, length - written)
        f.write(view[:to_write])
        written += to_write

    sync_file(f, fsync=fsync)
    return written


def copy_permissions(src: Path, dst: Path) -> bool:
    """Copy permission bits from ``src`` to ``dst``.

    Returns:
        True if permissions were copied, False if it failed (best effort)
    """
    try:
        shutil.copymode(src, dst)
        return True
    except OSError as e:
        logger.debug("Could not copy permissions %s -> %s: %s", src, dst, e)
        return False


def remove_quietly(path: Path) -> bool:
    """Remove a file this process created, ignoring a missing file.

    Used only for cleanup after a failure, where the original error is the
    one worth reporting.

    Returns:
        True if the file is gone afterwards
    """
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("Cleanup of %s failed: %s", path, e)
        return False
