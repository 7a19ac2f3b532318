"""Loudness measurement for the level meter and the detection gate."""

import numpy as np

from ..note_types import PitchSample


class LoudnessMeter:
    """Scaled RMS loudness, clamped to 0-100."""

    def __init__(self, gain: float = 1000.0) -> None:
        self._gain = gain

    def measure(self, sample: PitchSample) -> float:
        """Return the loudness of a snapshot as a percentage.

        An empty snapshot measures 0.
        """
        if len(sample) == 0:
            return 0.0
        buffer = np.asarray(sample.samples, dtype=np.float64)
        rms = float(np.sqrt(np.mean(buffer**2)))
        return min(100.0, rms * self._gain)
