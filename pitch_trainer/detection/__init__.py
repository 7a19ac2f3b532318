"""Per-tick pitch detection: loudness gate, period estimate, note mapping."""

from .analyzer import analyze_sample
from .loudness import LoudnessMeter
from .pitch_estimator import PitchEstimator

__all__ = ["LoudnessMeter", "PitchEstimator", "analyze_sample"]
