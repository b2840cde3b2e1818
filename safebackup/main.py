#!/usr/bin/env python3
"""SafeBackup command line entry point.

Usage:
    safebackup                          # prompt for filename and command
    safebackup notes.txt backup         # back up notes.txt to notes.txt.bak
    safebackup notes.txt restore        # restore notes.txt from its backup
    safebackup notes.txt delete         # overwrite with zeros, then remove
    safebackup notes.txt backup --json  # machine-readable result

Options:
    --root DIR      Directory to operate in (default: current directory)
    --config PATH   Settings YAML overriding the packaged defaults
    --json          Print the operation result as JSON
    --verbose       Debug logging on stderr

Exit codes:
    0  operation succeeded
    1  operation failed (message on stderr)
    2  usage error: unknown command, bad settings or root directory
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from .backup.file_guard import COMMANDS, FileGuard
from .errors import SafeBackupError
from .utils.constants import ALLOWED_EXTENSIONS
from .utils.settings import load_settings

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def configure_logging(level_name: str) -> None:
    """Configure the root logger for diagnostics on stderr.

    Repeated calls replace the handler added by a previous call instead of
    stacking duplicates.
    """
    level = getattr(logging, level_name.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_added_by_safebackup", False):
            root_logger.removeHandler(handler)
            handler.close()

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream.setLevel(level)
    setattr(stream, "_added_by_safebackup", True)
    root_logger.addHandler(stream)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="safebackup",
        description="Back up, restore, or securely delete a text file in one directory"
    )
    parser.add_argument("filename", nargs="?", help="File to operate on (.txt, .log or .md)")
    parser.add_argument("command", nargs="?", help=f"One of: {', '.join(COMMANDS)}")
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Directory to operate in (default: current directory)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings YAML overriding the packaged defaults"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON for machine parsing"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr"
    )
    return parser.parse_args(argv)


def print_banner() -> None:
    extensions = ", ".join(f".{ext}" for ext in ALLOWED_EXTENSIONS)
    print("== SafeBackup ==")
    print(f"Supported commands: {', '.join(COMMANDS)}")
    print(f"Only text-like files are allowed: {extensions}")
    print()


def read_line(prompt: str, input_fn: Callable[[str], str] = input) -> str:
    return input_fn(prompt).strip()


def format_human_readable(result: dict[str, Any]) -> str:
    """Render a successful operation result as a one-line message."""
    command = result["command"]
    if command == "backup":
        return f"Your backup created: {result['path']}"
    if command == "restore":
        return f"Your file restored from backup to: {result['path']}"
    return "File securely deleted."


def _fail(message: str, as_json: bool, code: int, **extra: Any) -> int:
    if as_json:
        print(json.dumps({"status": "error", "error": message, **extra}, indent=2))
    else:
        print(message, file=sys.stderr)
    return code


def main(argv: Optional[list[str]] = None, input_fn: Callable[[str], str] = input) -> int:
    """Main entry point for SafeBackup.

    Args:
        argv: Command line arguments (default: ``sys.argv[1:]``)
        input_fn: Prompt function used when filename or command is missing

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except SafeBackupError as e:
        return _fail(f"Invalid settings: {e}", args.json, EXIT_USAGE, kind=e.kind.value)

    configure_logging("debug" if args.verbose else settings.log_level)

    filename = args.filename
    command = args.command

    if filename is None or command is None:
        if not args.json:
            print_banner()
        try:
            if filename is None:
                filename = read_line("Please enter your file name: ", input_fn)
            if command is None:
                command = read_line(
                    f"Please enter your command ({', '.join(COMMANDS)}): ", input_fn
                )
        except (EOFError, KeyboardInterrupt, UnicodeDecodeError) as e:
            return _fail(f"Failed to read input: {str(e) or type(e).__name__}", args.json, EXIT_FAILED)

    try:
        guard = FileGuard(root=args.root, settings=settings)
    except SafeBackupError as e:
        return _fail(f"Invalid root directory: {e}", args.json, EXIT_USAGE, kind=e.kind.value)

    logger.debug("Running %s on %s in %s", command, filename, guard.root)
    result = guard.run(command, filename)

    if result["status"] == "success":
        code = EXIT_OK
    elif result.get("kind") == "UnknownCommand":
        code = EXIT_USAGE
    else:
        code = EXIT_FAILED

    if args.json:
        print(json.dumps(result, indent=2, default=str))
        return code

    if code == EXIT_OK:
        print(format_human_readable(result))
    elif code == EXIT_USAGE:
        print("Unknown command", file=sys.stderr)
    else:
        print(f"Operation failed: {result['error']}", file=sys.stderr)

    return code


if __name__ == "__main__":
    sys.exit(main())
