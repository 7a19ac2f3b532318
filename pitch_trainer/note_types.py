"""Type definitions for the Pitch Trainer project."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class PitchClass(IntEnum):
    """The twelve equal-tempered pitch classes, in table order."""

    C = 0
    C_SHARP = 1
    D = 2
    D_SHARP = 3
    E = 4
    F = 5
    F_SHARP = 6
    G = 7
    G_SHARP = 8
    A = 9
    A_SHARP = 10
    B = 11

    @property
    def label(self) -> str:
        """Display name, e.g. 'C#'."""
        return self.name.replace("_SHARP", "#")

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, eq=False)
class PitchSample:
    """A time-domain snapshot of the capture buffer."""

    samples: np.ndarray  # Amplitudes in [-1, 1]
    sample_rate: float  # Hz, active for the capture session

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True)
class ClosestNote:
    """The table entry nearest to an estimated frequency."""

    pitch_class: PitchClass
    octave_slot: int  # 0-based index into the reference table
    accuracy_percent: int  # 0-100

    @property
    def octave(self) -> int:
        return self.octave_slot + 2

    @property
    def label(self) -> str:
        return f"{self.pitch_class.label}{self.octave}"


@dataclass(frozen=True)
class DetectionResult:
    """What the output sink sees after each analysis tick."""

    note_label: str = ""  # Pitch class + octave (e.g. 'A4'), or empty
    frequency_hz: float = 0.0  # One decimal place, 0 when no pitch
    accuracy_percent: int = 0  # 0-100
    loudness_percent: float = 0.0  # 0-100

    @classmethod
    def reset(cls, loudness_percent: float = 0.0) -> DetectionResult:
        """A result with no note, optionally carrying the current loudness."""
        return cls(loudness_percent=loudness_percent)

    @property
    def has_note(self) -> bool:
        return bool(self.note_label)
