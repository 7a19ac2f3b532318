"""Configuration management for Pitch Trainer components."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, Any, Optional
import json
import os
from pathlib import Path

from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaptureSettings:
    """Settings for the microphone capture chain."""

    device_id: Optional[int] = None
    sample_rate: int = 44100
    window_size: int = 4096  # Samples per snapshot
    smoothing: float = 0.8  # Spectrum smoothing; time-domain snapshots are unaffected
    channels: int = 1

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> CaptureSettings:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in known})


@dataclass(frozen=True)
class AnalysisSettings:
    """Thresholds for the per-tick analysis pipeline."""

    loudness_gain: float = 1000.0
    loudness_gate: float = 5.0  # Pitch is only estimated above this loudness
    min_frequency: float = 80.0
    max_frequency: float = 1000.0
    correlation_threshold: float = 0.2  # Raw autocorrelation sum, not normalized
    frame_rate: float = 60.0

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> AnalysisSettings:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in known})


def _as_dict(settings) -> Dict[str, Any]:
    return {f.name: getattr(settings, f.name) for f in fields(settings)}


class ConfigManager:
    """Configuration manager for Pitch Trainer components."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/pitch_trainer by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "pitch_trainer")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default configurations
        self.default_configs = {
            "capture": _as_dict(CaptureSettings()),
            "analysis": _as_dict(AnalysisSettings()),
        }

        # Load existing configurations or create default ones
        self.configs = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file or create default.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary
        """
        config_file = self.config_dir / f"{name}.json"

        if config_file.exists():
            try:
                with open(config_file, "r") as f:
                    config = json.load(f)
                logger.info(f"Loaded configuration from {config_file}")

                # Ensure all default keys are present
                for key, value in default_config.items():
                    if key not in config:
                        config[key] = value

                return config
            except (OSError, ValueError) as e:
                logger.error(f"Error loading configuration from {config_file}: {e}")
                return default_config.copy()
        else:
            # Create default configuration
            config = default_config.copy()
            self.save_config(name, config)
            return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Save configuration to file.

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self.config_dir / f"{name}.json"

        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a copy of the configuration by name."""
        return self.configs.get(name, {}).copy()

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Args:
            name: Configuration name
            updates: Dictionary of updates to apply

        Returns:
            True if updated and saved successfully, False otherwise
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = self.default_configs[name].copy()
        return self.save_config(name, self.configs[name])

    def capture_settings(self) -> CaptureSettings:
        return CaptureSettings.from_dict(self.get_config("capture"))

    def analysis_settings(self) -> AnalysisSettings:
        return AnalysisSettings.from_dict(self.get_config("analysis"))
