"""Utility functions for mapping frequencies onto the reference note table."""

import math

from .logger import get_logger
from .note_table import iter_entries
from .note_types import ClosestNote

# Get logger for this module
logger = get_logger(__name__)

# A reading this far from the reference (as a fraction of it) scores zero
ACCURACY_SPAN = 0.1


def accuracy_percent(frequency_hz: float, reference_hz: float) -> int:
    """Score how close a frequency is to a reference, from 0 to 100.

    Args:
        frequency_hz: Estimated frequency in Hz
        reference_hz: Reference frequency from the note table

    Returns:
        100 for an exact match, falling linearly to 0 at 10% away

    Examples:
        >>> accuracy_percent(440.0, 440.0)
        100
        >>> accuracy_percent(484.0, 440.0)
        0
    """
    distance = abs(frequency_hz - reference_hz)
    max_distance = reference_hz * ACCURACY_SPAN
    score = max(0.0, 100 - (distance / max_distance) * 100)
    # Halves round up
    return int(math.floor(score + 0.5))


def closest_note(frequency_hz: float) -> ClosestNote:
    """Find the reference note nearest to a frequency.

    Every entry of the table is compared; on equal distance the entry declared
    first wins.

    Args:
        frequency_hz: Estimated frequency in Hz

    Returns:
        The closest pitch class and octave slot with its accuracy score
    """
    best = None
    best_distance = math.inf

    for pitch_class, octave_slot, reference_hz in iter_entries():
        distance = abs(frequency_hz - reference_hz)
        if distance < best_distance:
            best_distance = distance
            best = (pitch_class, octave_slot, reference_hz)

    pitch_class, octave_slot, reference_hz = best
    note = ClosestNote(
        pitch_class=pitch_class,
        octave_slot=octave_slot,
        accuracy_percent=accuracy_percent(frequency_hz, reference_hz),
    )
    logger.debug(
        f"{frequency_hz:.1f}Hz -> {note.label} "
        f"(ref {reference_hz:.2f}Hz, accuracy {note.accuracy_percent}%)"
    )
    return note
