"""Guarded file operations bound to one root directory.

``FileGuard`` is the high-level entry point used by the shell. It holds the
root directory, the settings and the audit log, runs one of the transfer
operations, and records completed operations in the audit trail.

The root is captured once when the guard is created (defaulting to the
current working directory), so later ``chdir`` calls in the process do not
change where operations happen.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..errors import SafeBackupError
from ..output.audit_log import AuditLog
from ..utils.path_safety import ensure_contained, resolve_root, validate_filename
from ..utils.settings import Settings
from .transfer import backup_file, restore_file, secure_delete

logger = logging.getLogger(__name__)

COMMANDS = ("backup", "restore", "delete")


class FileGuard:
    """Runs backup, restore and secure delete inside a root directory.

    Typical use binds a guard to a directory and calls ``run()`` with a
    command name, e.g. ``FileGuard(root=notes_dir).run("backup", "todo.txt")``,
    which returns a result dict whose ``status`` is "success" or "error".
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        settings: Optional[Settings] = None,
        audit_log: Optional[AuditLog] = None
    ):
        """Initialize the guard.

        Args:
            root: Directory operations are confined to (default: cwd)
            settings: Runtime settings (default: built-in defaults)
            audit_log: Recorder for completed operations (default:
                ``settings.log_file`` inside the root)

        Raises:
            NotFoundError: If the root does not exist
            PathTraversalError: If the audit log path escapes the root
        """
        self.root = resolve_root(root if root is not None else Path.cwd())
        self.settings = settings or Settings()
        if audit_log is None:
            audit_log = AuditLog(ensure_contained(self.root, validate_filename(self.settings.log_file)))
        self.audit = audit_log

        # Track operation results
        self.results: list[dict[str, Any]] = []

    def backup(self, name: str) -> Path:
        """Create ``<name>.bak``; see ``transfer.backup_file``."""
        path = backup_file(
            self.root, name, chunk_size=self.settings.chunk_size, fsync=self.settings.sync
        )
        self.audit.info(f"Backup created for {name}")
        return path

    def restore(self, name: str) -> Path:
        """Restore ``<name>`` from its backup; see ``transfer.restore_file``."""
        path = restore_file(
            self.root, name, chunk_size=self.settings.chunk_size, fsync=self.settings.sync
        )
        self.audit.info(f"Restore completed for {name}")
        return path

    def delete(self, name: str) -> None:
        """Overwrite and remove ``<name>``; see ``transfer.secure_delete``."""
        secure_delete(
            self.root, name, chunk_size=self.settings.chunk_size, fsync=self.settings.sync
        )
        self.audit.info(f"Secure delete completed for {name}")

    def _operation(self, command: str) -> Optional[Callable[[str], Optional[Path]]]:
        return {
            "backup": self.backup,
            "restore": self.restore,
            "delete": self.delete,
        }.get(command)

    def run(self, command: str, name: str) -> dict[str, Any]:
        """Run an operation by name and report the outcome as a dictionary.

        Operation failures are reported in the result, not raised.

        Args:
            command: One of "backup", "restore", "delete" (case-insensitive)
            name: Raw filename from the user

        Returns:
            Dictionary with:
            - status: 'success' or 'error'
            - command: The normalized command name
            - filename: The filename as given
            - path: Resulting file path (None for delete and on error)
            - kind, error, step, failed_path: Failure details (errors only)
        """
        command = command.strip().lower()
        result: dict[str, Any] = {
            'status': 'success',
            'command': command,
            'filename': name,
            'path': None,
        }

        operation = self._operation(command)
        if operation is None:
            result.update({
                'status': 'error',
                'kind': 'UnknownCommand',
                'error': f"Unknown command: {command or '(empty)'}",
                'step': 'dispatch',
            })
            self.results.append(result)
            return result

        try:
            path = operation(name)
            if path is not None:
                result['path'] = str(path)
        except SafeBackupError as e:
            logger.info("%s %s failed (%s): %s", command, name, e.kind.value, e)
            result.update({
                'status': 'error',
                'kind': e.kind.value,
                'error': e.message,
                'step': e.step,
                'failed_path': e.path,
            })
            if self.settings.log_failures:
                self.audit.error(f"{command} failed for {name}: {e}")

        self.results.append(result)
        return result

    def get_summary(self) -> dict[str, int]:
        """Get counts of operation results by status.

        Returns:
            Dictionary with 'total', 'success' and 'error' counts
        """
        summary = {'total': len(self.results), 'success': 0, 'error': 0}
        for result in self.results:
            summary[result['status']] = summary.get(result['status'], 0) + 1
        return summary
