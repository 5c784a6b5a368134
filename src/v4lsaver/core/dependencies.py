"""External dependency checks."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

from v4lsaver.core.errors import MissingDependencyError
from v4lsaver.core.gateway.v4l2 import DEFAULT_EXECUTABLE

logger = logging.getLogger(__name__)

INSTALL_HINTS = """Installation instructions:

Debian/Ubuntu:
  sudo apt update
  sudo apt install v4l-utils

Arch Linux:
  sudo pacman -S v4l-utils

Fedora/RHEL/CentOS:
  sudo dnf install v4l-utils
  # or on older versions:
  sudo yum install v4l-utils

Alpine Linux:
  sudo apk add v4l-utils"""


def check_dependencies(
    executables: Sequence[str] = (DEFAULT_EXECUTABLE,), dev_dir: Path = Path("/dev")
) -> None:
    """Verify required programs are installed and warn when no video nodes exist.

    Raises:
        MissingDependencyError: If any executable is not found on PATH
    """
    missing = [name for name in executables if shutil.which(name) is None]
    if missing:
        raise MissingDependencyError(missing)

    if not any(Path(dev_dir).glob("video*")):
        logger.warning(f"No video devices found in {dev_dir}/")
        logger.warning(
            "Make sure your camera/video devices are connected and detected by the kernel."
        )
        logger.warning("You can check with: lsusb | grep -i camera")
        logger.warning("Or check kernel messages: dmesg | grep -i video")
