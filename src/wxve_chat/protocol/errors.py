"""Exception taxonomy for the chat protocol client.

Only ConcurrentRequestError is raised to callers of the client; every
other failure is contained and resolved to a terminal response state.
"""


class ChatClientError(Exception):
    """Base class for chat client errors."""


class DecodeError(ChatClientError):
    """Raised when a single stream record cannot be interpreted.

    The record is skipped; the stream continues.
    """

    def __init__(self, message: str, record: str | None = None):
        super().__init__(message)
        self.record = record


class ProtocolViolation(ChatClientError):
    """Raised when the server breaks the chunk protocol.

    Examples: a chunk arriving after the turn has ended, or an
    unrecognized chunk type.
    """


class UnknownChunkTypeError(DecodeError, ProtocolViolation):
    """Raised when a record carries an unrecognized `type` discriminator."""


class TransportError(ChatClientError):
    """Raised when the connection fails, drops, or returns a non-success status."""


class ConcurrentRequestError(ChatClientError):
    """Raised when a new turn is started while another one is still live."""


class CancellationError(ChatClientError):
    """Raised when the caller aborts an in-flight turn."""

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)
