"""Application-wide constants.

This module centralizes the webhook field names and limits so the models,
the decoder and the FastAPI dependency agree on a single source of truth.
"""

# =============================================================================
# Webhook Envelope
# =============================================================================

# Event payload keys on a messaging item, in the order they are checked
# when resolving which event a messaging item carries
MESSAGING_EVENT_FIELDS = (
    "message",
    "optin",
    "postback",
    "account_linking",
    "referral",
)

# =============================================================================
# Request Limits
# =============================================================================

# Largest webhook body accepted by the FastAPI dependency (bytes).
# Messenger batches are small; 1 MiB leaves ample headroom.
MAX_WEBHOOK_BODY_BYTES = 1_048_576

# =============================================================================
# Logging
# =============================================================================

# Default stdlib logging level
DEFAULT_LOG_LEVEL = "INFO"
