"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_TOKEN_MINUTES = 60 * 24 * 7
DEFAULT_PAGE_SIZE = 20
DEFAULT_AUDIT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
DEFAULT_LEADERBOARD_LIMIT = 10

MIN_PASSWORD_LENGTH = 6
MAX_DESCRIPTION_LENGTH = 1000
MAX_REASON_LENGTH = 500
MAX_MESSAGE_LENGTH = 500

TASK_COMPLETED_POINTS = 10
LATE_LOGIN_POINTS = -5
LATE_LOGIN_THRESHOLD = time(9, 30)
DEFAULT_HALF_DAY_MINUTES = 4 * 60

ALLOWED_SUBMISSION_EXTENSIONS = frozenset({"pdf", "csv"})
DEFAULT_MAX_UPLOAD_MB = 10

# Attendance rows of founders and co-founders carry this instead of a department.
MANAGEMENT_DEPARTMENT = "management"
