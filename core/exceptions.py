"""
Exception hierarchy for the scan-and-solve workflow.

Invalid arithmetic is not an error here: the evaluator returns a marker
value instead of raising.
"""


class CalcScanError(Exception):
    """Base class for all workflow errors."""


class ImageDecodeError(CalcScanError, ValueError):
    """The uploaded payload could not be decoded as an image."""


class ImageTooLargeError(CalcScanError, ValueError):
    """The uploaded payload exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Image is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit


class ProcessingError(CalcScanError):
    """A step of the solve pipeline failed; the session can be retried."""

    user_message = "Could not process the image."


class CropError(ProcessingError):
    user_message = "Cropping failed."


class EnhancementError(ProcessingError):
    user_message = "Image processing failed to return an image."


class ExtractionError(ProcessingError):
    user_message = "Could not extract data from the image."


class InvalidTransition(CalcScanError, ValueError):
    """An event is not applicable to the current session state."""

    def __init__(self, state: str, event: str):
        super().__init__(f"Cannot apply {event} in state '{state}'")
        self.state = state
        self.event = event


class SessionNotFound(CalcScanError, KeyError):
    """No session exists for the given id."""
