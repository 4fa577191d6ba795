"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_ACTIVITY_LEVEL = 1
MAX_ACTIVITY_LEVEL = 5
DEFAULT_ACTIVITY_LEVEL = 1
DEFAULT_EVENT_ORGANIZER = "Not specified"

MIN_PASSWORD_LENGTH = 6

DEFAULT_CERTIFICATE_EXTENSIONS = frozenset({"pdf", "png", "jpg", "jpeg"})

# Column widths of database/schema.sql; TEXT columns capped well under 64 KiB.
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 190
MAX_DEPARTMENT_LENGTH = 120
MAX_CLASS_LENGTH = 60
MAX_ROLL_NUMBER_LENGTH = 60
MAX_TITLE_LENGTH = 255
MAX_ORGANIZER_LENGTH = 255
MAX_TEXT_LENGTH = 10000
MAX_POINTS = 2**31 - 1
MAX_SEMESTER = 20
