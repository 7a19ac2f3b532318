"""In-memory capture source for unit tests and demos."""

from typing import Optional

import numpy as np

from .core.errors import CaptureUnavailable
from .core.interfaces import ICaptureHandle, ICaptureSource
from .note_types import PitchSample


class MockCaptureHandle(ICaptureHandle):
    def __init__(self, source: "MockCaptureSource") -> None:
        self._source = source
        self.closed = False

    @property
    def sample_rate(self) -> float:
        return self._source.sample_rate

    def read_snapshot(self) -> PitchSample:
        if self.closed:
            raise RuntimeError("Capture is closed")
        self._source.reads += 1
        return PitchSample(
            samples=self._source.buffer.copy(), sample_rate=self._source.sample_rate
        )

    def close(self) -> None:
        self.closed = True
        self._source.open_handles -= 1


class MockCaptureSource(ICaptureSource):
    """A capture source whose buffer is set directly by the test."""

    def __init__(
        self,
        buffer: Optional[np.ndarray] = None,
        sample_rate: float = 44100.0,
        fail: bool = False,
    ) -> None:
        self.buffer = buffer if buffer is not None else np.zeros(4096, np.float32)
        self.sample_rate = sample_rate
        self.fail = fail
        self.open_handles = 0
        self.opens = 0
        self.reads = 0

    def open(self) -> MockCaptureHandle:
        if self.fail:
            raise CaptureUnavailable("Permission denied")
        if self.open_handles:
            raise CaptureUnavailable("Capture device busy")
        self.opens += 1
        self.open_handles += 1
        return MockCaptureHandle(self)
