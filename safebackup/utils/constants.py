"""Centralized constants for SafeBackup.

The extension allow-list is part of the tool's threat model: it limits the
tool to text-like files and is intentionally not configurable.
"""

# =============================================================================
# FILENAME RULES
# =============================================================================

# Only text-like files may be managed
ALLOWED_EXTENSIONS = ("txt", "log", "md")

# Longest accepted filename, in bytes
MAX_FILENAME_BYTES = 255

# Characters accepted in a filename besides ASCII letters and digits
ALLOWED_PUNCTUATION = "._-"

# =============================================================================
# ARTIFACT NAMES
# =============================================================================

# Suffix appended to a managed file's name for its backup
BACKUP_SUFFIX = ".bak"

# Suffix for the transient file written during restore
TEMP_SUFFIX = ".tmp"

# Default audit trail, relative to the root directory
DEFAULT_LOG_FILE = "logfile.txt"

# =============================================================================
# I/O
# =============================================================================

# Buffer size for stream copies and zero overwrites (8 KiB)
CHUNK_SIZE = 8192

# Permission mode for newly created backup and temp files (owner read/write only)
FILE_MODE = 0o600

# Timestamp layout for audit log records
LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
