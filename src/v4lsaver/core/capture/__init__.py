"""Capture device discovery.

This module provides video node enumeration, device path / serial
resolution, and capture-format summaries.
"""

from v4lsaver.core.capture.device import DeviceManager
from v4lsaver.core.capture.formats import summarize_formats

__all__ = [
    "DeviceManager",
    "summarize_formats",
]
