"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ROUNDING_MINUTES = 0
MAX_ROUNDING_MINUTES = 60

MIN_REJECTION_REASON_LENGTH = 2
MAX_REJECTION_REASON_LENGTH = 1000
MAX_NOTES_LENGTH = 2000
MAX_ROLE_TAG_LENGTH = 80

DEFAULT_LIST_LIMIT = 500
