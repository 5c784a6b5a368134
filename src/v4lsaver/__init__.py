"""v4l-saver: save and restore V4L2 camera controls by serial number."""

from v4lsaver.core.version import __version__

__all__ = ["__version__"]
