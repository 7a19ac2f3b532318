"""Pitch Trainer - real-time pitch detection for singing and instrument practice."""

from .note_types import ClosestNote, DetectionResult, PitchClass, PitchSample
from .note_utils import closest_note
from .session import AnalysisSession

__version__ = "0.1.0"

__all__ = [
    "AnalysisSession",
    "ClosestNote",
    "DetectionResult",
    "PitchClass",
    "PitchSample",
    "closest_note",
]
