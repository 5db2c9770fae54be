"""Base exception classes for the prombridge domain layer."""


class PromBridgeError(Exception):
    """Base exception for all prombridge errors.

    All package-specific exceptions inherit from this class so callers
    can handle export failures in one place.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)


class ExpositionError(PromBridgeError):
    """Raised when a snapshot cannot be rendered in the negotiated format.

    Propagates out of the pull handler; the HTTP layer turns it into a
    500 response.
    """

    def __init__(self, content_type: str, reason: str) -> None:
        self.content_type = content_type
        self.reason = reason
        super().__init__(f"Failed to render metrics as {content_type}: {reason}")
