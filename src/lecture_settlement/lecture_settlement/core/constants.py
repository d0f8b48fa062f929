"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CURRENCY_SYMBOL = "₹"

DEFAULT_ACTIVITY_LIMIT = 100
DEFAULT_HISTORY_LIMIT = 200

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 0.2
DEFAULT_LOCK_TIMEOUT_SECONDS = 10
