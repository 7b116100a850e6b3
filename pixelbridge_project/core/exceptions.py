"""Exception types raised by the event forwarding pipeline."""
from typing import Any, Optional


class PixelBridgeError(Exception):
    """Base exception for all PixelBridge errors."""


class EventValidationError(PixelBridgeError):
    """Raised when an inbound event is rejected before any outbound call."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ConversionsApiError(PixelBridgeError):
    """Raised when the Conversions API answers with a non-success status."""

    def __init__(self, status_code: int, body: Optional[Any] = None):
        super().__init__(f"Facebook API Error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body
