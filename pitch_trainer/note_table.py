"""Reference frequencies for the twelve pitch classes across five octave slots.

Slot ``i`` is displayed as octave ``i + 2``; standard tuning, A4 = 440 Hz.
"""

from typing import Iterator, Tuple

from .note_types import PitchClass

OCTAVE_SLOTS = 5
FIRST_DISPLAYED_OCTAVE = 2

# [pitch_class][octave_slot] -> Hz
NOTE_FREQUENCIES: Tuple[Tuple[float, ...], ...] = (
    (65.41, 130.81, 261.63, 523.25, 1046.5),  # C
    (69.3, 138.59, 277.18, 554.37, 1108.73),  # C#
    (73.42, 146.83, 293.66, 587.33, 1174.66),  # D
    (77.78, 155.56, 311.13, 622.25, 1244.51),  # D#
    (82.41, 164.81, 329.63, 659.25, 1318.51),  # E
    (87.31, 174.61, 349.23, 698.46, 1396.91),  # F
    (92.5, 185.0, 369.99, 739.99, 1479.98),  # F#
    (98.0, 196.0, 392.0, 783.99, 1567.98),  # G
    (103.83, 207.65, 415.3, 830.61, 1661.22),  # G#
    (110.0, 220.0, 440.0, 880.0, 1760.0),  # A
    (116.54, 233.08, 466.16, 932.33, 1864.66),  # A#
    (123.47, 246.94, 493.88, 987.77, 1975.53),  # B
)


def reference_frequency(pitch_class: PitchClass, octave_slot: int) -> float:
    """Look up the reference frequency for a pitch class and octave slot.

    Raises:
        IndexError: If the octave slot is outside 0-4
    """
    if not 0 <= octave_slot < OCTAVE_SLOTS:
        raise IndexError(f"Octave slot out of range: {octave_slot}")
    return NOTE_FREQUENCIES[pitch_class][octave_slot]


def iter_entries() -> Iterator[Tuple[PitchClass, int, float]]:
    """Yield (pitch_class, octave_slot, frequency) in declaration order."""
    for pitch_class in PitchClass:
        for octave_slot, frequency in enumerate(NOTE_FREQUENCIES[pitch_class]):
            yield pitch_class, octave_slot, frequency
