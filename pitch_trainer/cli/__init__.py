"""Command-line interface for Pitch Trainer."""

from .main import main

__all__ = ["main"]
