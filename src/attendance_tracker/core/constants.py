"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'
PASSWORD_RULE_MESSAGE = (
    "Password must be at least 8 characters, include uppercase, lowercase, number, and special character."
)

ENROLLMENT_BLOCK_MESSAGE = "You cannot enroll in a class with a different block."
# Fragment of the message raised by trg_same_block_enrollment.
TRIGGER_BLOCK_FRAGMENT = "already enrolled in block"

ATTENDANCE_THRESHOLD = 75
TOP_PERFORMERS = 3

CLASS_FEED_CAPACITY = 200

DEFAULT_LLM_MODEL = "gemini-2.5-flash"
DEFAULT_LLM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
