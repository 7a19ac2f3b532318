"""Factory for creating Pitch Trainer components."""

from typing import Callable, Dict, Optional

from ..logger import get_logger
from ..session import AnalysisSession
from .config import AnalysisSettings, CaptureSettings, ConfigManager
from .interfaces import ICaptureSource, IScheduler

logger = get_logger(__name__)


def _microphone_source(factory: "ComponentFactory", **kwargs) -> ICaptureSource:
    # Imported here so PortAudio is only loaded when a microphone is used
    from ..audio.sounddevice_input import SoundDeviceInput

    config = factory.config_manager.get_config("capture")
    config.update({k: v for k, v in kwargs.items() if v is not None})
    return SoundDeviceInput(CaptureSettings.from_dict(config))


def _wav_source(factory: "ComponentFactory", file_path: str, **kwargs) -> ICaptureSource:
    from ..audio.wav_file_input import WavFileInput

    capture = factory.config_manager.capture_settings()
    analysis = factory.config_manager.analysis_settings()
    return WavFileInput(
        file_path,
        window_size=kwargs.get("window_size") or capture.window_size,
        frame_rate=analysis.frame_rate,
        gain=kwargs.get("gain", 1.0),
    )


class ComponentFactory:
    """Factory for creating Pitch Trainer components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default capture implementations
        self.capture_sources: Dict[str, Callable[..., ICaptureSource]] = {
            "microphone": _microphone_source,
            "wav": _wav_source,
        }

    def create_capture_source(
        self, implementation: str = "microphone", **kwargs
    ) -> ICaptureSource:
        """Create a capture source.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Overrides for the stored capture configuration

        Returns:
            Capture source instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.capture_sources:
            raise ValueError(f"Unknown capture implementation: {implementation}")

        instance = self.capture_sources[implementation](self, **kwargs)
        logger.info(f"Created capture source: {implementation}")
        return instance

    def create_session(
        self,
        capture_source: Optional[ICaptureSource] = None,
        scheduler: Optional[IScheduler] = None,
        **kwargs,
    ) -> AnalysisSession:
        """Create an analysis session.

        Args:
            capture_source: Capture source, or None to create a microphone source
            scheduler: Frame scheduler, or None for a session-owned FrameScheduler
            **kwargs: Overrides for the stored analysis configuration

        Returns:
            Analysis session instance
        """
        if capture_source is None:
            capture_source = self.create_capture_source()

        config = self.config_manager.get_config("analysis")
        config.update(kwargs)

        session = AnalysisSession(
            capture_source,
            scheduler=scheduler,
            settings=AnalysisSettings.from_dict(config),
        )
        logger.info("Created analysis session")
        return session
