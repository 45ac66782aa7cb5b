"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Frosh ids are INT columns; a leading digit makes them non-negative.
FROSH_ID_MIN = 0
FROSH_ID_MAX = 2**31 - 1

# Width of the VARCHAR uid columns.
MEMBER_HANDLE_MAX_LENGTH = 64

# Operating year starts on this month/day when YEAR_START is not configured.
YEAR_START_MONTH = 6
YEAR_START_DAY = 1

DEFAULT_AUTH_USER_HEADER = "X-Auth-User"
DEFAULT_AUTH_GROUPS_HEADER = "X-Auth-Groups"
