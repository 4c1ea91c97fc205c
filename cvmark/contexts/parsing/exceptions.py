"""Custom exceptions for the parsing context."""

from typing import Optional


class InvalidDocumentError(TypeError):
    """
    Exception raised when the parser is handed something that is not text.

    Malformed markdown never raises; it is reported as ParseIssue values.
    This exception covers only the structurally unreadable case.

    Attributes:
        message: Error description
        received_type: Name of the type that was passed in
    """

    def __init__(self, message: str, received_type: Optional[str] = None):
        self.message = message
        self.received_type = received_type

        parts = [message]
        if received_type:
            parts.append(f"Received: {received_type}")

        super().__init__("\n".join(parts))
