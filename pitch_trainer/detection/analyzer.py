"""One analysis tick: loudness gate, period estimate, note mapping."""

from typing import Optional

from ..core.config import AnalysisSettings
from ..note_types import DetectionResult, PitchSample
from ..note_utils import closest_note
from .loudness import LoudnessMeter
from .pitch_estimator import PitchEstimator


def analyze_sample(
    sample: PitchSample,
    settings: Optional[AnalysisSettings] = None,
    meter: Optional[LoudnessMeter] = None,
    estimator: Optional[PitchEstimator] = None,
) -> DetectionResult:
    """Turn one snapshot into the result published for that tick.

    Loudness is always reported. A note is reported only when the snapshot
    is louder than the gate and the estimate falls strictly inside the
    configured frequency band; otherwise the result is reset.

    Args:
        sample: Time-domain snapshot and its sample rate
        settings: Analysis thresholds, or None for the defaults
        meter: Loudness meter to reuse, or None to build one from settings
        estimator: Pitch estimator to reuse, or None to build one from settings

    Returns:
        The DetectionResult for this snapshot
    """
    settings = settings or AnalysisSettings()
    meter = meter or LoudnessMeter(gain=settings.loudness_gain)
    estimator = estimator or PitchEstimator(
        min_frequency=settings.min_frequency,
        max_frequency=settings.max_frequency,
        threshold=settings.correlation_threshold,
    )

    loudness = meter.measure(sample)
    loudness_percent = round(loudness, 1)
    if loudness <= settings.loudness_gate:
        return DetectionResult.reset(loudness_percent)

    frequency = estimator.estimate(sample)
    if not settings.min_frequency < frequency < settings.max_frequency:
        return DetectionResult.reset(loudness_percent)

    note = closest_note(frequency)
    return DetectionResult(
        note_label=note.label,
        frequency_hz=round(frequency, 1),
        accuracy_percent=note.accuracy_percent,
        loudness_percent=loudness_percent,
    )
