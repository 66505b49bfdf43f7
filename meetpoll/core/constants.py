"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Poll lifecycle statuses (exact spelling is stored and exposed by the API)
POLL_STATUS_DRAFT = "draft"
POLL_STATUS_ACTIVE = "active"
POLL_STATUS_COMPLETED = "completed"
POLL_STATUS_CANCELLED = "cancelled"
POLL_STATUS_EXPIRED = "expired"

# Meeting modalities
MODALITY_VIDEO = "video"
MODALITY_IN_PERSON = "in-person"
MODALITY_PHONE = "phone"
MODALITIES = (MODALITY_VIDEO, MODALITY_IN_PERSON, MODALITY_PHONE)

# Poll defaults
DEFAULT_DURATION_MINUTES = 30
MAX_DURATION_MINUTES = 24 * 60

# Notification ledger
EMAIL_TYPE_INVITE = "invite"
EMAIL_TYPE_CONFIRMATION = "confirmation"
EMAIL_STATUS_SENT = "sent"
EMAIL_STATUS_FAILED = "failed"

# Participant capability tokens: 32 random bytes, URL-safe base64 (~43 chars)
TOKEN_BYTES = 32

# Availability suggestions
SUGGESTION_WINDOW_DAYS = 14
SUGGESTION_DAY_START_HOUR = 9
SUGGESTION_DAY_END_HOUR = 14
SUGGESTION_STEP_MINUTES = 30
DEFAULT_PREFERRED_HOURS = (9, 10, 11)

# JWT Token Configuration
# Token expiration time in minutes (8 hours)
ACCESS_TOKEN_EXPIRE_MINUTES = 480
