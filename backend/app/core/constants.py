"""Application-wide constants for the SocietyHub messaging core."""

BRAND_NAME = "SocietyHub"

API_TITLE = f"{BRAND_NAME} Messaging API"
API_VERSION = "1.0.0"
API_DESCRIPTION = (
    "Conversations, realtime chat, presence and preference-driven notifications "
    "for residential societies."
)

# Text constraints
MAX_MESSAGE_LENGTH = 5000
MAX_EMOJI_LENGTH = 10

# Notification fan-out
BROADCAST_BATCH_SIZE = 50

# Query limits
DEFAULT_NOTIFICATION_LIMIT = 50
MAX_QUERY_LIMIT = 500

# Realtime channel
WS_PATH = "/ws"
WS_TOKEN_QUERY_PARAM = "token"
