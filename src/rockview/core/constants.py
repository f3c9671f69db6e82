"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_CENTRE_LEADERS = 2
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_RECENT_LIMIT = 5
DEFAULT_NOTIFICATION_PAGE_SIZE = 20
DEFAULT_MESSAGE_PAGE_SIZE = 20
MIN_PASSWORD_LENGTH = 6
MIN_PHONE_LENGTH = 10
UNASSIGNED = "Unassigned"
