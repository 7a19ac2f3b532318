"""Live analysis session that ties capture, scheduling and detection together."""

from __future__ import annotations

import functools
import threading
from typing import Hashable, Optional

from .logger import get_logger
from .core.config import AnalysisSettings
from .core.errors import CaptureUnavailable
from .core.events import DetectionEvents
from .core.interfaces import ICaptureHandle, ICaptureSource, IScheduler
from .core.scheduler import FrameScheduler
from .detection.analyzer import analyze_sample
from .detection.loudness import LoudnessMeter
from .detection.pitch_estimator import PitchEstimator
from .note_types import DetectionResult

logger = get_logger(__name__)


class AnalysisSession:
    """Listens to a capture source and publishes a DetectionResult every frame.

    The session is either idle or listening. ``start`` opens the capture
    source and schedules the first tick; each tick analyzes one snapshot and
    requests the next frame; ``stop`` revokes the pending frame, closes the
    capture handle and publishes a reset result.

    Ticks and ``stop`` are serialized with a lock, so the capture handle is
    only touched by one thread at a time even when the scheduler runs ticks
    on a worker thread.
    """

    def __init__(
        self,
        capture_source: ICaptureSource,
        scheduler: Optional[IScheduler] = None,
        settings: Optional[AnalysisSettings] = None,
        events: Optional[DetectionEvents] = None,
    ) -> None:
        """Initialize the session.

        Args:
            capture_source: Where snapshots come from
            scheduler: Frame scheduler, or None to create a FrameScheduler
                owned (and closed) by this session
            settings: Analysis thresholds, or None for the defaults
            events: Output sink, or None to create one
        """
        self._capture_source = capture_source
        self._settings = settings or AnalysisSettings()
        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or FrameScheduler(self._settings.frame_rate)
        self.events = events or DetectionEvents()

        self._meter = LoudnessMeter(gain=self._settings.loudness_gain)
        self._estimator = PitchEstimator(
            min_frequency=self._settings.min_frequency,
            max_frequency=self._settings.max_frequency,
            threshold=self._settings.correlation_threshold,
        )

        self._lock = threading.RLock()
        self._capture: Optional[ICaptureHandle] = None
        self._pending: Optional[Hashable] = None
        self._active = False
        self._generation = 0
        self._result = DetectionResult.reset()

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    @property
    def result(self) -> DetectionResult:
        """The most recently published result."""
        return self._result

    def is_listening(self) -> bool:
        return self._active

    def start(self) -> bool:
        """Open the capture source and begin analyzing.

        Returns:
            True if the session is listening, False if capture was unavailable
        """
        with self._lock:
            if self._active:
                logger.warning("Analysis session already listening")
                return True

            try:
                self._capture = self._capture_source.open()
            except CaptureUnavailable as e:
                self._capture = None
                logger.error(f"Error accessing audio capture: {e}")
                self.events.emit_error(e.user_message)
                return False

            self._active = True
            self._generation += 1
            logger.info(
                f"Analysis session started at {self._capture.sample_rate:g} Hz"
            )
            self._request_tick()
            return True

    def stop(self) -> None:
        """Stop analyzing and release the capture source.

        Safe to call when idle.
        """
        with self._lock:
            was_active = self._active
            self._active = False

            if self._pending is not None:
                self._scheduler.cancel_frame(self._pending)
                self._pending = None

            capture, self._capture = self._capture, None
            try:
                if capture is not None:
                    capture.close()
            finally:
                if was_active or self._result != DetectionResult.reset():
                    self._publish(DetectionResult.reset())

            if was_active:
                logger.info("Analysis session stopped")

    def close(self) -> None:
        """Stop the session and shut down a scheduler it created."""
        self.stop()
        if self._owns_scheduler:
            self._scheduler.close()

    def __enter__(self) -> AnalysisSession:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _request_tick(self) -> None:
        tick = functools.partial(self._tick, self._generation)
        self._pending = self._scheduler.request_frame(tick)

    def _tick(self, generation: int) -> None:
        with self._lock:
            # A tick left over from before a stop/start cycle is dropped
            if not self._active or generation != self._generation:
                return
            self._pending = None

            try:
                sample = self._capture.read_snapshot()
                result = analyze_sample(
                    sample, self._settings, self._meter, self._estimator
                )
            except Exception as e:
                logger.error(f"Error analyzing audio: {e}", exc_info=True)
                self.events.emit_error(f"Audio analysis failed: {e}")
            else:
                self._publish(result)

            # A result listener may have stopped or restarted the session
            if self._active and generation == self._generation:
                self._request_tick()

    def _publish(self, result: DetectionResult) -> None:
        if result.has_note and result.note_label != self._result.note_label:
            logger.debug(
                f"{result.note_label} ({result.frequency_hz:.1f}Hz, "
                f"accuracy {result.accuracy_percent}%, "
                f"loudness {result.loudness_percent:.1f}%)"
            )
        self._result = result
        self.events.emit_result(result)
