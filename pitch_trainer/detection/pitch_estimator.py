"""Fundamental frequency estimation by autocorrelation period search."""

from __future__ import annotations

import math
from typing import ClassVar

import numpy as np

from ..logger import get_logger
from ..note_types import PitchSample

logger = get_logger(__name__)


class PitchEstimator:
    """Finds the lag at which a snapshot best matches a shifted copy of itself.

    The correlation at each lag is the raw sum ``sum(x[i] * x[i + lag])`` with
    no energy normalization, so the confidence threshold is amplitude
    dependent: a quiet signal needs stronger periodicity to clear it.
    """

    DEFAULT_MIN_FREQUENCY: ClassVar[float] = 80.0  # Hz, sets the longest lag
    DEFAULT_MAX_FREQUENCY: ClassVar[float] = 1000.0  # Hz, sets the shortest lag
    DEFAULT_THRESHOLD: ClassVar[float] = 0.2

    def __init__(
        self,
        min_frequency: float = DEFAULT_MIN_FREQUENCY,
        max_frequency: float = DEFAULT_MAX_FREQUENCY,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        """Initialize the estimator.

        Args:
            min_frequency: Lowest frequency searched, in Hz
            max_frequency: Highest frequency searched, in Hz
            threshold: Correlation sum the best lag must exceed
        """
        self._min_frequency = min_frequency
        self._max_frequency = max_frequency
        self._threshold = threshold

    def lag_range(self, sample_rate: float) -> range:
        """Candidate lags (in samples) for a sample rate, shortest first."""
        min_period = max(1, math.floor(sample_rate / self._max_frequency))
        max_period = math.floor(sample_rate / self._min_frequency)
        return range(min_period, max_period)

    def estimate(self, sample: PitchSample) -> float:
        """Estimate the fundamental frequency of a snapshot.

        Args:
            sample: Time-domain snapshot and its sample rate

        Returns:
            Frequency in Hz, or 0.0 if no lag correlates above the threshold
        """
        sample_rate = sample.sample_rate
        if sample_rate <= 0 or len(sample) == 0:
            return 0.0

        buffer = np.asarray(sample.samples, dtype=np.float64)
        n = len(buffer)
        best_correlation = 0.0
        best_period = 0
        for period in self.lag_range(sample_rate):
            if period >= n:
                break
            correlation = float(np.dot(buffer[: n - period], buffer[period:]))
            # Strict comparison keeps the shortest of equally good lags
            if correlation > best_correlation:
                best_correlation = correlation
                best_period = period

        if best_correlation > self._threshold:
            frequency = sample_rate / best_period
            logger.debug(
                f"Best lag {best_period} (correlation {best_correlation:.3f}) "
                f"-> {frequency:.1f}Hz"
            )
            return frequency

        logger.debug(f"No confident pitch (best correlation {best_correlation:.3f})")
        return 0.0
