import threading
import time
import unittest

import numpy as np

from pitch_trainer.core.config import AnalysisSettings
from pitch_trainer.core.scheduler import FrameScheduler, ManualScheduler
from pitch_trainer.mock_capture import MockCaptureSource
from pitch_trainer.note_types import DetectionResult
from pitch_trainer.session import AnalysisSession


def sine_buffer(frequency=440.0, amplitude=0.5, sample_rate=44100, length=4096):
    t = np.arange(length) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


class TestAnalysisSession(unittest.TestCase):
    def setUp(self):
        self.source = MockCaptureSource(buffer=sine_buffer())
        self.scheduler = ManualScheduler()
        self.session = AnalysisSession(self.source, scheduler=self.scheduler)
        self.results = []
        self.errors = []
        self.session.events.on_result(self.results.append)
        self.session.events.on_error(self.errors.append)

    def tearDown(self):
        self.session.close()

    def test_initially_idle(self):
        self.assertFalse(self.session.is_listening())
        self.assertEqual(self.session.result, DetectionResult.reset())
        self.assertEqual(self.source.opens, 0)

    def test_start_schedules_first_tick(self):
        self.assertTrue(self.session.start())
        self.assertTrue(self.session.is_listening())
        self.assertEqual(self.scheduler.pending, 1)
        self.assertEqual(self.source.reads, 0)

    def test_tick_publishes_detection_and_reschedules(self):
        self.session.start()
        self.assertEqual(self.scheduler.run_pending(), 1)

        result = self.session.result
        self.assertEqual(result.note_label, "A4")
        self.assertAlmostEqual(result.frequency_hz, 441.0)
        self.assertGreaterEqual(result.accuracy_percent, 95)
        self.assertGreater(result.loudness_percent, 5)
        self.assertEqual(self.results, [result])
        self.assertEqual(self.scheduler.pending, 1)

    def test_each_tick_reads_a_fresh_snapshot(self):
        self.session.start()
        self.scheduler.run_pending()
        self.source.buffer = np.zeros(4096, dtype=np.float32)
        self.scheduler.run_pending()

        self.assertEqual(self.source.reads, 2)
        self.assertEqual(self.results[0].note_label, "A4")
        self.assertEqual(self.results[1], DetectionResult("", 0.0, 0, 0.0))

    def test_stop_releases_capture_and_resets(self):
        self.session.start()
        self.scheduler.run_pending()
        self.session.stop()

        self.assertFalse(self.session.is_listening())
        self.assertEqual(self.source.open_handles, 0)
        self.assertEqual(self.scheduler.pending, 0)
        self.assertEqual(self.session.result, DetectionResult("", 0.0, 0, 0.0))
        self.assertEqual(self.results[-1], DetectionResult.reset())

    def test_no_ticks_after_stop(self):
        self.session.start()
        self.session.stop()
        self.assertEqual(self.scheduler.run_pending(), 0)
        self.assertEqual(self.source.reads, 0)

    def test_stop_is_idempotent(self):
        self.session.stop()
        self.session.start()
        self.session.stop()
        self.session.stop()

        self.assertFalse(self.session.is_listening())
        self.assertEqual(self.session.result, DetectionResult.reset())
        self.assertEqual(self.errors, [])

    def test_restart_after_stop(self):
        self.assertTrue(self.session.start())
        self.session.stop()
        self.assertTrue(self.session.start())
        self.scheduler.run_pending()

        self.assertEqual(self.source.opens, 2)
        self.assertEqual(self.source.open_handles, 1)
        self.assertEqual(self.session.result.note_label, "A4")

    def test_start_twice_keeps_one_capture(self):
        self.assertTrue(self.session.start())
        self.assertTrue(self.session.start())
        self.assertEqual(self.source.opens, 1)
        self.assertEqual(self.scheduler.pending, 1)

    def test_capture_unavailable_stays_idle(self):
        self.source.fail = True

        self.assertFalse(self.session.start())
        self.assertFalse(self.session.is_listening())
        self.assertEqual(self.scheduler.pending, 0)
        self.assertEqual(len(self.errors), 1)
        self.assertIn("microphone", self.errors[0])

    def test_listener_can_stop_the_session(self):
        self.session.events.on_result(lambda result: self.session.stop())
        self.session.start()
        self.scheduler.run_pending()

        self.assertFalse(self.session.is_listening())
        self.assertEqual(self.scheduler.pending, 0)
        self.assertEqual(self.source.open_handles, 0)

    def test_analysis_error_keeps_loop_running(self):
        self.session.start()
        self.source.buffer = None  # read_snapshot fails
        self.scheduler.run_pending()

        self.assertTrue(self.session.is_listening())
        self.assertEqual(len(self.errors), 1)
        self.assertEqual(self.scheduler.pending, 1)

        self.source.buffer = sine_buffer()
        self.scheduler.run_pending()
        self.assertEqual(self.session.result.note_label, "A4")

    def test_context_manager_stops(self):
        with AnalysisSession(self.source, scheduler=self.scheduler) as session:
            session.start()
            self.scheduler.run_pending()
        self.assertFalse(session.is_listening())
        self.assertEqual(self.source.open_handles, 0)

    def test_settings_are_applied(self):
        session = AnalysisSession(
            self.source,
            scheduler=self.scheduler,
            settings=AnalysisSettings(loudness_gate=100.0),
        )
        session.start()
        self.scheduler.run_pending()
        self.assertFalse(session.result.has_note)
        self.assertEqual(session.result.loudness_percent, 100.0)
        session.stop()


class TestFrameScheduler(unittest.TestCase):
    def test_session_runs_on_worker_thread(self):
        source = MockCaptureSource(buffer=sine_buffer())
        session = AnalysisSession(
            source, settings=AnalysisSettings(frame_rate=200.0)
        )
        try:
            self.assertTrue(session.start())
            deadline = time.monotonic() + 5.0
            while source.reads < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
            self.assertGreaterEqual(source.reads, 3)
            self.assertEqual(session.result.note_label, "A4")
        finally:
            session.close()

        self.assertFalse(session.is_listening())
        self.assertEqual(source.open_handles, 0)
        reads = source.reads
        time.sleep(0.05)
        self.assertEqual(source.reads, reads)

    def test_cancelled_frame_does_not_run(self):
        scheduler = FrameScheduler(frame_rate=100.0)
        calls = []
        try:
            handle = scheduler.request_frame(lambda: calls.append("cancelled"))
            scheduler.cancel_frame(handle)
            scheduler.request_frame(lambda: calls.append("kept"))
            deadline = time.monotonic() + 2.0
            while not calls and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            scheduler.close()
        self.assertEqual(calls, ["kept"])
        self.assertEqual(scheduler.pending, 0)

    def test_cancel_after_run_leaves_nothing_pending(self):
        scheduler = FrameScheduler(frame_rate=100.0)
        ran = threading.Event()
        try:
            handle = scheduler.request_frame(ran.set)
            self.assertEqual(scheduler.pending, 1)
            self.assertTrue(ran.wait(2.0))
            # Same race as stop() revoking a tick the worker already took
            scheduler.cancel_frame(handle)
            self.assertEqual(scheduler.pending, 0)
        finally:
            scheduler.close()

    def test_closed_scheduler_rejects_frames(self):
        scheduler = FrameScheduler()
        scheduler.close()
        with self.assertRaises(RuntimeError):
            scheduler.request_frame(lambda: None)

    def test_invalid_frame_rate(self):
        with self.assertRaises(ValueError):
            FrameScheduler(frame_rate=0)


if __name__ == "__main__":
    unittest.main()
