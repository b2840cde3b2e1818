"""Append-only audit trail.

Each completed operation adds one line to ``logfile.txt`` in the root:

    [2025-01-31 14:02:11] INFO: Backup created for notes.txt

Timestamps are UTC. The file is only ever appended to; it is never
truncated or rotated here.

Recording is best effort: an operation that already succeeded must not be
reported as failed because its log line could not be written, so
``record()`` never raises.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from ..utils.constants import LOG_TIMESTAMP_FORMAT

logger = logging.getLogger(__name__)


def format_record(level: str, message: str, now: Optional[datetime] = None) -> str:
    """Build a single audit line, including the trailing newline.

    Newlines inside ``message`` are flattened so a record always occupies
    exactly one line.
    """
    now = now or datetime.now(timezone.utc)
    flat = " ".join(message.splitlines())
    return f"[{now.strftime(LOG_TIMESTAMP_FORMAT)}] {level.upper()}: {flat}\n"


class AuditLog:
    """Appends timestamped records to an audit file.

    Typical use is ``AuditLog(root / "logfile.txt").info("Backup created for notes.txt")``;
    every call returns True when the line was written.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def record(self, level: str, message: str) -> bool:
        """Append one record.

        The line is written with a single ``write`` call on a descriptor
        opened with O_APPEND, so concurrent writers do not interleave
        within a line.

        Returns:
            True if the record was written, False otherwise
        """
        data = format_record(level, message).encode("utf-8", "backslashreplace")
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
            try:
                os.write(fd, data)
            finally:
                os.close(fd)
            return True
        except OSError as e:
            logger.warning("Could not write audit record to %s: %s", self.path, e)
            return False

    def info(self, message: str) -> bool:
        return self.record("INFO", message)

    def error(self, message: str) -> bool:
        return self.record("ERROR", message)
