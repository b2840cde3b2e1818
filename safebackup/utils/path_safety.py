"""Path safety utilities to prevent directory traversal attacks.

Two layers guard every path SafeBackup touches:

1. ``validate_filename()`` turns a raw user string into a ``Filename`` or
   rejects it. Separators and ".." are refused outright, so a validated
   name can only ever refer to an entry directly inside the root.
2. ``ensure_contained()`` resolves the root directory to its canonical form
   and verifies that the joined path is still beneath it. With a validated
   name this never fails; it backs up the validator and catches a root
   reached through symlinks.

Known limitation:
    The containment check and the later open() are separate system calls.
    Swapping a parent directory or planting a symlink in between is an
    accepted race; the tool does not use directory-handle-relative opens.
"""

import os
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..errors import (
    InvalidNameError,
    IoFailureError,
    NameRejection,
    NotFoundError,
    PathTraversalError,
)
from .constants import (
    ALLOWED_EXTENSIONS,
    ALLOWED_PUNCTUATION,
    BACKUP_SUFFIX,
    MAX_FILENAME_BYTES,
    TEMP_SUFFIX,
)

_ALLOWED_CHARS = frozenset(string.ascii_letters + string.digits + ALLOWED_PUNCTUATION)


def _reject(raw: str, reason: NameRejection, message: str) -> None:
    raise InvalidNameError(message, reason=reason, path=raw)


def _check_filename(raw: str) -> str:
    """Run the ordered filename checks, raising on the first failure.

    Returns:
        The accepted extension (without the dot)
    """
    if not raw:
        _reject(raw, NameRejection.EMPTY, "filename is empty")

    if len(raw.encode("utf-8", "surrogatepass")) > MAX_FILENAME_BYTES:
        _reject(raw, NameRejection.TOO_LONG, "filename too long")

    if "/" in raw or "\\" in raw:
        _reject(raw, NameRejection.SEPARATOR, "path separators are not allowed")

    if ".." in raw:
        _reject(raw, NameRejection.TRAVERSAL, "traversal tokens are not allowed")

    if any(ch not in _ALLOWED_CHARS for ch in raw):
        _reject(raw, NameRejection.INVALID_CHARACTERS, "filename contains invalid characters")

    # A leading dot alone (".txt") is a hidden file with no extension
    stem, dot, extension = raw.rpartition(".")
    if not dot or not stem:
        _reject(raw, NameRejection.MISSING_EXTENSION, "file must have an extension")

    if extension not in ALLOWED_EXTENSIONS:
        allowed = ", ".join(f".{ext}" for ext in ALLOWED_EXTENSIONS[:-1])
        _reject(
            raw,
            NameRejection.EXTENSION_NOT_ALLOWED,
            f"only {allowed}, or .{ALLOWED_EXTENSIONS[-1]} files are allowed in this tool",
        )

    return extension


@dataclass(frozen=True)
class Filename:
    """A filename that has passed every validation check.

    Constructing a ``Filename`` runs the validator, so holding one is proof
    that the name is safe to join onto the root directory.

    Example:
        >>> name = Filename("notes.txt")
        >>> name.backup_name
        'notes.txt.bak'
        >>> Filename("../etc/passwd")
        Traceback (most recent call last):
            ...
        InvalidNameError: path separators are not allowed
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"Filename expects str, got {type(self.value).__name__}")
        _check_filename(self.value)

    @property
    def extension(self) -> str:
        return self.value.rpartition(".")[2]

    @property
    def backup_name(self) -> str:
        """Name of the backup artifact for this file."""
        return self.value + BACKUP_SUFFIX

    @property
    def temp_name(self) -> str:
        """Name of the transient file used while restoring."""
        return self.value + TEMP_SUFFIX

    def __str__(self) -> str:
        return self.value


def validate_filename(raw: Union[str, Filename]) -> Filename:
    """Validate a raw filename string.

    Checks run in a fixed order and the first failure wins:
    empty, too long, separators, "..", invalid characters, missing
    extension, extension not in the allow-list.

    Args:
        raw: The user-supplied filename (a ``Filename`` passes through)

    Returns:
        The validated ``Filename``

    Raises:
        InvalidNameError: With ``reason`` set to the failing check

    Examples:
        >>> validate_filename("report.md").value
        'report.md'
        >>> validate_filename("report.exe")
        Traceback (most recent call last):
            ...
        InvalidNameError: only .txt, .log, or .md files are allowed in this tool
    """
    if isinstance(raw, Filename):
        return raw
    return Filename(raw)


def resolve_root(root: Union[str, Path]) -> Path:
    """Resolve the root directory to its canonical, symlink-free form.

    Raises:
        NotFoundError: If the root does not exist or is not a directory
        IoFailureError: If the root cannot be resolved (e.g. symlink loop)
    """
    try:
        base = Path(root).resolve(strict=True)
    except FileNotFoundError:
        raise NotFoundError(f"root directory does not exist: {root}", path=root, step="contain")
    except (OSError, RuntimeError) as e:
        raise IoFailureError("cannot resolve root directory", cause=e, path=root, step="contain") from e

    if not base.is_dir():
        raise NotFoundError(f"root is not a directory: {root}", path=root, step="contain")

    return base


def ensure_contained(root: Union[str, Path], relative: Union[str, Path, Filename]) -> Path:
    """Join a relative path onto the root and prove it stays inside.

    The root is canonicalized; the relative part is joined as
    ``base / parent / name`` (parent defaulting to ".") and normalized
    lexically, so a ".." or an absolute path that slipped past the
    validator is still caught.

    Args:
        root: The directory all operations are confined to
        relative: A validated filename or a name derived from one

    Returns:
        The absolute path inside the root

    Raises:
        PathTraversalError: If the joined path is not beneath the root

    Examples:
        >>> ensure_contained("/tmp", "notes.txt")
        PosixPath('/tmp/notes.txt')
        >>> ensure_contained("/tmp", "../notes.txt")
        Traceback (most recent call last):
            ...
        PathTraversalError: path escapes root directory: ../notes.txt
    """
    base = resolve_root(root)
    rel = Path(str(relative))

    candidate = Path(os.path.normpath(base / rel.parent / rel.name))

    # The root itself is not a file inside the root
    if candidate == base or base not in candidate.parents:
        raise PathTraversalError(
            f"path escapes root directory: {relative}", path=candidate, step="contain"
        )

    return candidate


if __name__ == "__main__":
    import tempfile

    print("Path Safety Demo")
    print("=" * 50)

    for raw in ["notes.txt", "../../etc/passwd", "a\\b.txt", ".txt", "run.sh", ""]:
        try:
            print(f"  {raw!r:24} -> OK ({validate_filename(raw)})")
        except InvalidNameError as e:
            print(f"  {raw!r:24} -> {e.reason.value}: {e}")

    with tempfile.TemporaryDirectory() as tmpdir:
        for rel in ["notes.txt", "notes.txt.bak", "../outside.txt", "/etc/passwd"]:
            try:
                print(f"  ensure_contained({rel!r}) -> {ensure_contained(tmpdir, rel)}")
            except PathTraversalError as e:
                print(f"  ensure_contained({rel!r}) -> BLOCKED: {e}")
