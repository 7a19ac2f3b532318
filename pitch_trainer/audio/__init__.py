"""Capture sources that supply snapshots to an analysis session."""
