"""Output modules.

Modules:
    audit_log: Append-only audit trail of completed operations
"""

from .audit_log import (
    AuditLog,
    format_record,
)

__all__ = [
    'AuditLog',
    'format_record',
]
