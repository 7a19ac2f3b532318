"""Defines the core interfaces for the Pitch Trainer application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Hashable

from ..note_types import PitchSample


class ICaptureHandle(ABC):
    """An open capture session that can be sampled on demand."""

    @property
    @abstractmethod
    def sample_rate(self) -> float:
        """Sample rate in Hz active for this capture session."""
        pass

    @abstractmethod
    def read_snapshot(self) -> PitchSample:
        """Return the most recent window of time-domain samples."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the capture resources."""
        pass


class ICaptureSource(ABC):
    """Interface for capture collaborators."""

    @abstractmethod
    def open(self) -> ICaptureHandle:
        """Acquire the capture resources.

        Raises:
            CaptureUnavailable: If capture cannot be started
        """
        pass


class IScheduler(ABC):
    """Interface for "run this on the next frame" schedulers."""

    @abstractmethod
    def request_frame(self, callback: Callable[[], None]) -> Hashable:
        """Schedule a callback for the next frame and return a handle."""
        pass

    @abstractmethod
    def cancel_frame(self, handle: Hashable) -> None:
        """Revoke a pending callback. Unknown or spent handles are ignored."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Drop pending callbacks and release any worker resources."""
        pass
