"""Capture source that replays an audio file through the analysis loop."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..core.errors import CaptureUnavailable
from ..core.interfaces import ICaptureHandle, ICaptureSource
from ..note_types import PitchSample

logger = get_logger(__name__)


class WavFileCapture(ICaptureHandle):
    """Snapshots of a decoded file, advancing one hop per read."""

    def __init__(
        self, audio: np.ndarray, sample_rate: float, window_size: int, hop_size: int
    ) -> None:
        self._audio = audio
        self._sample_rate = float(sample_rate)
        self._window_size = window_size
        self._hop_size = hop_size
        self._cursor = 0

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._audio)

    def read_snapshot(self) -> PitchSample:
        """Return the window ending at the cursor, then advance the cursor.

        Samples before the start of the file read as silence.
        """
        self._cursor = min(self._cursor + self._hop_size, len(self._audio))
        start = self._cursor - self._window_size
        window = self._audio[max(0, start) : self._cursor]
        if start < 0:
            window = np.concatenate(
                (np.zeros(-start, dtype=self._audio.dtype), window)
            )
        return PitchSample(samples=window, sample_rate=self._sample_rate)

    def close(self) -> None:
        self._cursor = len(self._audio)


class WavFileInput(ICaptureSource):
    """Reads an audio file with soundfile; first channel only."""

    def __init__(
        self,
        file_path: str,
        window_size: int = 4096,
        frame_rate: float = 60.0,
        gain: float = 1.0,
    ) -> None:
        """Initialize the file source.

        Args:
            file_path: Path to a file soundfile can decode (WAV, FLAC, OGG)
            window_size: Samples per snapshot
            frame_rate: Analysis frames per second of audio; sets the hop size
            gain: Multiplier applied to the decoded samples
        """
        self._file_path = file_path
        self._window_size = window_size
        self._frame_rate = frame_rate
        self._gain = gain

    def hop_size(self, sample_rate: float) -> int:
        return max(1, int(round(sample_rate / self._frame_rate)))

    def frame_count(self) -> int:
        """Number of snapshots needed to walk the whole file.

        Raises:
            CaptureUnavailable: If the file cannot be read
        """
        try:
            info = sf.info(self._file_path)
        except (RuntimeError, OSError) as e:
            raise CaptureUnavailable(
                f"Cannot read {self._file_path}: {e}",
                user_message=f"Cannot open audio file: {self._file_path}",
            ) from e
        return math.ceil(info.frames / self.hop_size(info.samplerate))

    def open(self) -> WavFileCapture:
        try:
            data, sample_rate = sf.read(
                self._file_path, dtype="float32", always_2d=True
            )
        except (RuntimeError, OSError) as e:
            raise CaptureUnavailable(
                f"Cannot read {self._file_path}: {e}",
                user_message=f"Cannot open audio file: {self._file_path}",
            ) from e

        audio = data[:, 0]
        if self._gain != 1.0:
            audio = np.clip(audio * self._gain, -1.0, 1.0)

        logger.info(
            f"Opened {self._file_path}: {len(audio)} samples at {sample_rate} Hz"
        )
        return WavFileCapture(
            audio, sample_rate, self._window_size, self.hop_size(sample_rate)
        )
