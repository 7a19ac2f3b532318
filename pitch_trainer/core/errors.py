"""Exceptions raised by Pitch Trainer components."""

from typing import Optional


class PitchTrainerError(Exception):
    """Base class for Pitch Trainer errors."""


class CaptureUnavailable(PitchTrainerError):
    """Audio capture could not be started (permission denied, no device, bad file).

    ``user_message`` is the text shown to the user; the exception message
    carries the details for the log.
    """

    DEFAULT_USER_MESSAGE = "Please allow microphone access to use the pitch detector."

    def __init__(self, message: str, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message or self.DEFAULT_USER_MESSAGE
