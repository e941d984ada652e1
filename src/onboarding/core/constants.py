"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

from datetime import UTC, datetime


# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_LENGTH = 20
MAX_ACTION_TYPE_LENGTH = 20
MAX_ENTITY_TYPE_LENGTH = 100

# Pagination defaults (page numbers are zero-based)
DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Audit search defaults
AUDIT_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
AUDIT_SYSTEM_ACTOR = "SYSTEM"
AUDIT_DELETED_ACTOR_SUFFIX = " (deleted)"
AUDIT_CSV_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_CSV_FILENAME_FORMAT = "audit-log-%Y%m%d-%H%M%S.csv"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
