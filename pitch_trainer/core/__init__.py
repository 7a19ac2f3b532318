"""Core components for the Pitch Trainer application."""

# Import interfaces for easier access
from .errors import CaptureUnavailable, PitchTrainerError
from .interfaces import ICaptureHandle, ICaptureSource, IScheduler

__all__ = [
    "CaptureUnavailable",
    "ICaptureHandle",
    "ICaptureSource",
    "IScheduler",
    "PitchTrainerError",
]
