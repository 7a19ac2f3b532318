"""Frame schedulers that drive the analysis loop."""

from __future__ import annotations

import itertools
import queue
import threading
import time
from typing import Callable, Dict, Optional, Set, Tuple

from ..logger import get_logger
from .interfaces import IScheduler

logger = get_logger(__name__)


class FrameScheduler(IScheduler):
    """Runs frame callbacks one at a time on a single worker thread.

    A callback requested now runs no earlier than one frame interval from now.
    Callbacks never overlap because there is only one worker.
    """

    def __init__(self, frame_rate: float = 60.0) -> None:
        if frame_rate <= 0:
            raise ValueError(f"Frame rate must be positive: {frame_rate}")
        self._interval = 1.0 / frame_rate
        self._queue: "queue.Queue[Optional[Tuple[int, Callable[[], None], float]]]" = (
            queue.Queue()
        )
        self._waiting: Set[int] = set()  # requested, not yet run or cancelled
        self._handles = itertools.count(1)
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    def request_frame(self, callback: Callable[[], None]) -> int:
        with self._lock:
            if self._closed:
                raise RuntimeError("Scheduler is closed")
            handle = next(self._handles)
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name="pitch-trainer-frames", daemon=True
                )
                self._thread.start()
            self._waiting.add(handle)
        self._queue.put((handle, callback, time.monotonic() + self._interval))
        return handle

    def cancel_frame(self, handle: int) -> None:
        with self._lock:
            self._waiting.discard(handle)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._waiting)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
        self._queue.put(None)
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        logger.debug("Frame scheduler closed")

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                break
            handle, callback, due = item

            delay = due - time.monotonic()
            if delay > 0:
                time.sleep(delay)

            with self._lock:
                if handle not in self._waiting:
                    continue
                self._waiting.discard(handle)
                if self._closed:
                    continue

            try:
                callback()
            except Exception as e:
                logger.error(f"Error in frame callback: {e}", exc_info=True)


class ManualScheduler(IScheduler):
    """A scheduler whose frames advance only when ``run_pending`` is called.

    Used to run the analysis loop over recorded audio as fast as possible,
    and in tests.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, Callable[[], None]] = {}
        self._handles = itertools.count(1)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def close(self) -> None:
        self._pending.clear()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """Run the callbacks due on this frame.

        Callbacks requested while running are left for the next frame.

        Returns:
            Number of callbacks run
        """
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback()
        return len(due)
