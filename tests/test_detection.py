import unittest

import numpy as np
import pytest

from pitch_trainer.core.config import AnalysisSettings
from pitch_trainer.detection import LoudnessMeter, PitchEstimator, analyze_sample
from pitch_trainer.note_types import DetectionResult, PitchSample

SAMPLE_RATE = 44100
WINDOW = 4096


def sine(frequency, amplitude=0.5, sample_rate=SAMPLE_RATE, length=WINDOW):
    t = np.arange(length, dtype=np.float64) / sample_rate
    return PitchSample(
        samples=(amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32),
        sample_rate=sample_rate,
    )


def constant(value, length=WINDOW):
    return PitchSample(
        samples=np.full(length, value, dtype=np.float32), sample_rate=SAMPLE_RATE
    )


class TestLoudnessMeter(unittest.TestCase):
    def setUp(self):
        self.meter = LoudnessMeter()

    def test_silence(self):
        self.assertEqual(self.meter.measure(constant(0.0)), 0.0)
        self.assertEqual(self.meter.measure(constant(0.0, length=17)), 0.0)

    def test_empty_buffer(self):
        self.assertEqual(self.meter.measure(constant(0.0, length=0)), 0.0)

    def test_scaled_rms(self):
        self.assertAlmostEqual(self.meter.measure(constant(0.002)), 2.0, places=4)
        self.assertAlmostEqual(self.meter.measure(constant(-0.05)), 50.0, places=3)

    def test_clamped_to_100(self):
        self.assertEqual(self.meter.measure(constant(0.5)), 100.0)
        self.assertEqual(self.meter.measure(sine(440.0, amplitude=1.0)), 100.0)

    def test_custom_gain(self):
        meter = LoudnessMeter(gain=100.0)
        self.assertAlmostEqual(meter.measure(constant(0.1)), 10.0, places=4)


class TestPitchEstimator(unittest.TestCase):
    def setUp(self):
        self.estimator = PitchEstimator()

    def test_silence_has_no_pitch(self):
        self.assertEqual(self.estimator.estimate(constant(0.0)), 0.0)

    def test_lag_range(self):
        lags = self.estimator.lag_range(SAMPLE_RATE)
        self.assertEqual(lags.start, 44)
        self.assertEqual(lags.stop, 551)

    def test_a4(self):
        frequency = self.estimator.estimate(sine(440.0))
        # Best lag is 100 samples
        self.assertAlmostEqual(frequency, 441.0, places=6)

    def test_quiet_signal_below_raw_threshold(self):
        # Perfectly periodic but the unnormalized sum stays under 0.2
        self.assertEqual(self.estimator.estimate(sine(440.0, amplitude=0.005)), 0.0)

    def test_ties_keep_shortest_lag(self):
        samples = np.zeros(200, dtype=np.float32)
        samples[[0, 44, 45]] = 1.0
        # Lags 44 and 45 both correlate to exactly 1.0
        frequency = self.estimator.estimate(PitchSample(samples, SAMPLE_RATE))
        self.assertAlmostEqual(frequency, SAMPLE_RATE / 44)

    def test_negative_correlation_never_wins(self):
        samples = np.zeros(200, dtype=np.float32)
        samples[0], samples[50] = 1.0, -1.0
        self.assertEqual(self.estimator.estimate(PitchSample(samples, SAMPLE_RATE)), 0.0)

    def test_lags_outside_range_are_ignored(self):
        samples = np.zeros(200, dtype=np.float32)
        samples[[0, 10]] = 1.0
        samples[110] = 0.6
        # Lag 10 correlates best but is shorter than the 1000 Hz limit allows
        frequency = self.estimator.estimate(PitchSample(samples, SAMPLE_RATE))
        self.assertAlmostEqual(frequency, SAMPLE_RATE / 100)

    def test_matches_lag_by_lag_sum(self):
        rng = np.random.default_rng(7)
        t = np.arange(1024) / SAMPLE_RATE
        samples = 0.4 * np.sin(2 * np.pi * 300.0 * t) + 0.1 * rng.standard_normal(1024)

        best_correlation, best_period = 0.0, 0
        for period in self.estimator.lag_range(SAMPLE_RATE):
            correlation = sum(
                samples[i] * samples[i + period] for i in range(len(samples) - period)
            )
            if correlation > best_correlation:
                best_correlation, best_period = correlation, period

        frequency = self.estimator.estimate(PitchSample(samples, SAMPLE_RATE))
        self.assertAlmostEqual(frequency, SAMPLE_RATE / best_period)

    def test_buffer_shorter_than_lags(self):
        self.assertEqual(self.estimator.estimate(constant(0.5, length=10)), 0.0)

    def test_invalid_sample_rate(self):
        sample = PitchSample(samples=sine(440.0).samples, sample_rate=0)
        self.assertEqual(self.estimator.estimate(sample), 0.0)


@pytest.mark.parametrize("frequency", [110.0, 196.0, 261.63, 440.0, 659.25, 880.0])
def test_sine_estimate_within_two_percent(frequency):
    estimate = PitchEstimator().estimate(sine(frequency))
    assert estimate == pytest.approx(frequency, rel=0.02)


@pytest.mark.parametrize("sample_rate", [22050, 48000])
def test_sine_estimate_at_other_sample_rates(sample_rate):
    estimate = PitchEstimator().estimate(sine(330.0, sample_rate=sample_rate))
    assert estimate == pytest.approx(330.0, rel=0.02)


class TestAnalyzeSample(unittest.TestCase):
    def test_a4_end_to_end(self):
        result = analyze_sample(sine(440.0))
        self.assertEqual(result.note_label, "A4")
        self.assertAlmostEqual(result.frequency_hz, 440.0, delta=440.0 * 0.02)
        self.assertGreaterEqual(result.accuracy_percent, 95)
        self.assertGreater(result.loudness_percent, 5)

    def test_frequency_rounded_to_one_decimal(self):
        result = analyze_sample(sine(261.63))
        self.assertEqual(result.frequency_hz, round(result.frequency_hz, 1))
        self.assertEqual(result.note_label, "C4")

    def test_silence_end_to_end(self):
        self.assertEqual(analyze_sample(constant(0.0)), DetectionResult("", 0.0, 0, 0.0))

    def test_below_gate_reports_loudness_only(self):
        result = analyze_sample(sine(440.0, amplitude=0.004))
        self.assertFalse(result.has_note)
        self.assertEqual(result.frequency_hz, 0.0)
        self.assertEqual(result.accuracy_percent, 0)
        self.assertAlmostEqual(result.loudness_percent, 2.8, delta=0.1)

    def test_loud_but_out_of_band(self):
        # A DC offset correlates best at the shortest lag, just above 1000 Hz
        result = analyze_sample(constant(0.1))
        self.assertEqual(result, DetectionResult.reset(100.0))

    def test_custom_gate(self):
        settings = AnalysisSettings(loudness_gate=50.0)
        result = analyze_sample(sine(440.0, amplitude=0.03), settings)
        self.assertFalse(result.has_note)
        self.assertAlmostEqual(result.loudness_percent, 21.2, delta=0.1)


if __name__ == "__main__":
    unittest.main()
