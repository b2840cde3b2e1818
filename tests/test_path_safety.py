import dataclasses
import os

import pytest

from safebackup.errors import (
    ErrorKind,
    InvalidNameError,
    NameRejection,
    NotFoundError,
    PathTraversalError,
    SafeBackupError,
)
from safebackup.utils.path_safety import Filename, ensure_contained, validate_filename


@pytest.mark.parametrize("raw", ["a.txt", "notes-2024_v1.md", "app.log", "a.b.txt", "A9.md"])
def test_valid_names_are_accepted(raw):
    assert validate_filename(raw).value == raw


@pytest.mark.parametrize(
    "raw, reason",
    [
        ("", NameRejection.EMPTY),
        ("a" * 252 + ".txt", NameRejection.TOO_LONG),
        ("../../etc/passwd", NameRejection.SEPARATOR),
        ("dir/a.txt", NameRejection.SEPARATOR),
        ("a\\b.txt", NameRejection.SEPARATOR),
        ("..txt", NameRejection.TRAVERSAL),
        ("a..b.txt", NameRejection.TRAVERSAL),
        ("a b.txt", NameRejection.INVALID_CHARACTERS),
        ("café.txt", NameRejection.INVALID_CHARACTERS),
        ("a\x00.txt", NameRejection.INVALID_CHARACTERS),
        ("README", NameRejection.MISSING_EXTENSION),
        (".txt", NameRejection.MISSING_EXTENSION),
        ("run.sh", NameRejection.EXTENSION_NOT_ALLOWED),
        ("a.TXT", NameRejection.EXTENSION_NOT_ALLOWED),
        ("a.txt.", NameRejection.EXTENSION_NOT_ALLOWED),
        ("a.txt.bak", NameRejection.EXTENSION_NOT_ALLOWED),
    ],
)
def test_invalid_names_report_specific_reason(raw, reason):
    with pytest.raises(InvalidNameError) as excinfo:
        validate_filename(raw)
    assert excinfo.value.reason is reason
    assert excinfo.value.kind is ErrorKind.INVALID_NAME


def test_name_of_exactly_max_bytes_is_accepted():
    raw = "a" * 251 + ".txt"
    assert len(raw) == 255
    assert validate_filename(raw).value == raw


def test_length_is_measured_in_bytes():
    # 128 two-byte characters: short in characters, too long in bytes
    with pytest.raises(InvalidNameError) as excinfo:
        validate_filename("é" * 128 + ".txt")
    assert excinfo.value.reason is NameRejection.TOO_LONG


def test_first_failing_check_wins():
    # Separator check runs before traversal and character checks
    with pytest.raises(InvalidNameError) as excinfo:
        validate_filename("../x y.exe")
    assert excinfo.value.reason is NameRejection.SEPARATOR

    with pytest.raises(InvalidNameError) as excinfo:
        validate_filename("x..y z")
    assert excinfo.value.reason is NameRejection.TRAVERSAL

    with pytest.raises(InvalidNameError) as excinfo:
        validate_filename("/" * 300)
    assert excinfo.value.reason is NameRejection.TOO_LONG


def test_rejection_messages():
    with pytest.raises(InvalidNameError, match="traversal tokens are not allowed"):
        validate_filename("a..txt")
    with pytest.raises(InvalidNameError, match=r"only \.txt, \.log, or \.md files are allowed"):
        validate_filename("photo.png")


def test_invalid_name_error_is_value_error():
    with pytest.raises(ValueError):
        validate_filename("")
    with pytest.raises(SafeBackupError):
        validate_filename("")


def test_filename_properties():
    name = Filename("notes.txt")
    assert name.extension == "txt"
    assert name.backup_name == "notes.txt.bak"
    assert name.temp_name == "notes.txt.tmp"
    assert str(name) == "notes.txt"


def test_filename_is_immutable():
    name = Filename("notes.txt")
    with pytest.raises(dataclasses.FrozenInstanceError):
        name.value = "../evil.txt"


def test_filename_rejects_non_string():
    with pytest.raises(TypeError):
        Filename(123)


def test_validate_passes_filename_through():
    name = Filename("notes.md")
    assert validate_filename(name) is name


def test_ensure_contained_returns_path_inside_root(tmp_path):
    assert ensure_contained(tmp_path, "a.txt") == tmp_path.resolve() / "a.txt"
    assert ensure_contained(tmp_path, Filename("a.txt").backup_name) == tmp_path.resolve() / "a.txt.bak"


@pytest.mark.parametrize("relative", ["../a.txt", "sub/../../a.txt", "/etc/passwd", "", "."])
def test_ensure_contained_rejects_escapes(tmp_path, relative):
    with pytest.raises(PathTraversalError) as excinfo:
        ensure_contained(tmp_path, relative)
    assert excinfo.value.kind is ErrorKind.PATH_ESCAPE


def test_ensure_contained_canonicalizes_symlinked_root(tmp_path):
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    try:
        os.symlink(real, link, target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    assert ensure_contained(link, "a.txt") == real.resolve() / "a.txt"


def test_ensure_contained_requires_existing_root(tmp_path):
    with pytest.raises(NotFoundError):
        ensure_contained(tmp_path / "missing", "a.txt")


def test_ensure_contained_requires_directory_root(tmp_path):
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x")
    with pytest.raises(NotFoundError):
        ensure_contained(not_a_dir, "a.txt")


def test_undecodable_name_is_rejected_as_invalid_characters():
    # os.fsdecode turns a raw 0xff byte into a lone surrogate
    with pytest.raises(InvalidNameError) as excinfo:
        validate_filename("\udcff.txt")
    assert excinfo.value.reason is NameRejection.INVALID_CHARACTERS
