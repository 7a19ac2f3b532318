"""Main entry point for the Pitch Trainer CLI."""

import argparse
import sys
import time
from collections import Counter
from typing import List, Optional

from ..logger import get_logger
from ..logging_config import setup_logging
from ..core.config import ConfigManager
from ..core.errors import CaptureUnavailable
from ..core.factory import ComponentFactory
from ..core.scheduler import ManualScheduler
from ..note_types import DetectionResult

logger = get_logger(__name__)


def format_result(result: DetectionResult) -> str:
    """One console line for a detection result."""
    note = result.note_label or "--"
    return (
        f"{note:>4}  {result.frequency_hz:7.1f} Hz  "
        f"accuracy {result.accuracy_percent:3d}%  "
        f"volume {result.loudness_percent:5.1f}%"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Pitch Trainer - real-time pitch detection for practice"
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default=None,
        help="Configuration directory (default: ~/.config/pitch_trainer)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    listen_parser = subparsers.add_parser(
        "listen", help="Detect pitch from the microphone"
    )
    listen_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: until Ctrl+C)",
    )
    listen_parser.add_argument(
        "--device", type=int, default=None, help="Audio input device ID"
    )
    listen_parser.add_argument(
        "--sample-rate", type=int, default=None, help="Audio sample rate in Hz"
    )

    analyze_parser = subparsers.add_parser(
        "analyze", help="Run the detector over an audio file"
    )
    analyze_parser.add_argument("path", help="Audio file to analyze")
    analyze_parser.add_argument(
        "--gain", type=float, default=1.0, help="Input gain applied to the file"
    )

    subparsers.add_parser("devices", help="List audio input devices")

    return parser


def run_listen(factory: ComponentFactory, args: argparse.Namespace) -> int:
    """Show live detections on one console line until stopped."""
    try:
        source = factory.create_capture_source(
            "microphone", device_id=args.device, sample_rate=args.sample_rate
        )
    except OSError as e:
        # sounddevice raises OSError when PortAudio itself is missing
        logger.error(f"Audio backend unavailable: {e}")
        return 1

    def show(result: DetectionResult) -> None:
        print(f"\r{format_result(result)}", end="", flush=True)

    with factory.create_session(source) as session:
        session.events.on_result(show)
        session.events.on_error(lambda message: print(f"\n{message}", file=sys.stderr))

        if not session.start():
            return 1

        start_time = time.time()
        try:
            while session.is_listening():
                if args.duration is not None and time.time() - start_time >= args.duration:
                    break
                time.sleep(0.1)
        except KeyboardInterrupt:
            logger.info("Stopped by user")
        finally:
            print()
    return 0


def run_analyze(factory: ComponentFactory, args: argparse.Namespace) -> int:
    """Replay a file through the same analysis loop used for live input."""
    source = factory.create_capture_source("wav", file_path=args.path, gain=args.gain)
    try:
        frames = source.frame_count()
    except CaptureUnavailable as e:
        logger.error(str(e))
        return 1

    scheduler = ManualScheduler()
    session = factory.create_session(source, scheduler=scheduler)
    note_counts: Counter = Counter()
    last_note = ""

    def record(result: DetectionResult) -> None:
        nonlocal last_note
        if result.has_note:
            note_counts[result.note_label] += 1
        if result.note_label != last_note and result.has_note:
            print(format_result(result))
        last_note = result.note_label

    session.events.on_result(record)

    with session:
        if not session.start():
            return 1
        for _ in range(frames):
            scheduler.run_pending()

    logger.info(f"Analyzed {frames} frames")
    if note_counts:
        print("Note statistics:")
        for note_name, count in note_counts.most_common():
            print(f"  {note_name}: {count} frames")
    else:
        print("No pitch detected")
    return 0


def run_devices() -> int:
    """Print the audio devices that can record."""
    try:
        from ..audio.sounddevice_input import default_input_device, list_input_devices
    except OSError as e:
        logger.error(f"Audio backend unavailable: {e}")
        return 1

    default_device = default_input_device()
    print("Available input devices:")
    print("-" * 70)
    for device in list_input_devices():
        marker = "*" if device["id"] == default_device else " "
        print(
            f"{marker} {device['id']}: {device['name']} "
            f"({device['channels']} ch, {device['default_samplerate']:g} Hz)"
        )
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)
    setup_logging(level="DEBUG" if parsed_args.debug else "WARNING")

    if parsed_args.command == "devices":
        return run_devices()

    factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
    if parsed_args.command == "listen":
        return run_listen(factory, parsed_args)
    if parsed_args.command == "analyze":
        return run_analyze(factory, parsed_args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
