"""Client configuration constants.

Centralizes endpoint and timeout defaults for the streaming client.
"""

# Chat endpoint of the wxve.io assistant service
DEFAULT_ENDPOINT = "https://api.wxve.io/chat"

# Timeouts (seconds). Tool calls on the service side can stall the stream
# for a long time, so the read timeout is generous.
DEFAULT_READ_TIMEOUT = 300.0
DEFAULT_CONNECT_TIMEOUT = 10.0

ALLOWED_SCHEMES = frozenset({"http", "https"})

# Request headers
REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "text/event-stream",
}
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
