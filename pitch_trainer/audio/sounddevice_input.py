"""Microphone capture using the sounddevice library."""

from __future__ import annotations

import threading
from typing import Any, ClassVar, Dict, List, Optional

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from ..core.config import CaptureSettings
from ..core.errors import CaptureUnavailable
from ..core.interfaces import ICaptureHandle, ICaptureSource
from ..note_types import PitchSample

logger = get_logger(__name__)


class SoundDeviceCapture(ICaptureHandle):
    """An open input stream feeding a rolling window of recent samples."""

    def __init__(self, window_size: int) -> None:
        self._window_size = window_size
        self._buffer: Optional[np.ndarray] = np.zeros(window_size, dtype=np.float32)
        self._lock = threading.Lock()
        self._stream: Optional[sd.InputStream] = None
        self._sample_rate = 0.0

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    def connect(self, stream: sd.InputStream) -> None:
        """Attach and start the stream that fills the window."""
        self._stream = stream
        self._sample_rate = float(stream.samplerate)
        stream.start()

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Shift new input into the window.

        Called from the PortAudio thread, so it only copies samples.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        # Extract mono audio data (take first channel if multi-channel)
        data = indata[:, 0] if indata.ndim > 1 else indata
        with self._lock:
            if self._buffer is None:
                return
            n = len(data)
            if n >= self._window_size:
                self._buffer[:] = data[-self._window_size :]
            elif n:
                self._buffer[:-n] = self._buffer[n:]
                self._buffer[-n:] = data

    def read_snapshot(self) -> PitchSample:
        with self._lock:
            if self._buffer is None:
                raise RuntimeError("Capture is closed")
            samples = self._buffer.copy()
        return PitchSample(samples=samples, sample_rate=self._sample_rate)

    def close(self) -> None:
        """Stop and close the stream, then drop the window."""
        stream, self._stream = self._stream, None
        try:
            if stream is not None:
                stream.stop()
                stream.close()
        finally:
            with self._lock:
                self._buffer = None
        logger.info("Audio input stopped")


class SoundDeviceInput(ICaptureSource):
    """Capture source for a live input device."""

    FALLBACK_SAMPLE_RATES: ClassVar[List[int]] = [48000, 44100, 22050, 16000, 8000]

    def __init__(self, settings: Optional[CaptureSettings] = None) -> None:
        """Initialize the capture source.

        Args:
            settings: Device, sample rate and window settings, or None for defaults
        """
        self._settings = settings or CaptureSettings()

    def open(self) -> SoundDeviceCapture:
        """Open the input stream, trying the configured sample rate first.

        Raises:
            CaptureUnavailable: If no sample rate could be opened
        """
        settings = self._settings
        sample_rates_to_try = [settings.sample_rate] + [
            rate for rate in self.FALLBACK_SAMPLE_RATES if rate != settings.sample_rate
        ]

        errors = []
        for rate in sample_rates_to_try:
            capture = SoundDeviceCapture(settings.window_size)
            stream = None
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                stream = sd.InputStream(
                    device=settings.device_id,
                    channels=settings.channels,
                    samplerate=rate,
                    blocksize=0,
                    dtype="float32",
                    callback=capture._audio_callback,
                )
                capture.connect(stream)
                logger.info(f"Audio input started with sample rate {rate} Hz")
                return capture
            except (sd.PortAudioError, ValueError) as e:
                logger.warning(
                    f"Failed to start audio input with sample rate {rate} Hz: {e}"
                )
                errors.append(f"{rate} Hz: {e}")
                if stream is not None:
                    stream.close()

        error_msg = "Could not start audio input with any sample rate"
        logger.error(error_msg)
        raise CaptureUnavailable(f"{error_msg} ({'; '.join(errors)})")


def list_input_devices() -> List[Dict[str, Any]]:
    """Describe the audio devices that can record.

    Returns:
        One dict per input device with its id, name, channels and default rate
    """
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


def default_input_device() -> Optional[int]:
    """Return the default input device id, or None if there is none."""
    device = sd.default.device[0]
    return device if device is not None and device >= 0 else None
