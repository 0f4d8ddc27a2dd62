"""Sweep rotated log files whose name-embedded date is past the retention window."""

__version__ = "0.1.0"
