"""Gateway implementation that shells out to v4l2-ctl.

Uses list args (no shell=True). Calls block until v4l2-ctl returns; no
timeout is applied unless one is configured.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional

from v4lsaver.core.errors import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "v4l2-ctl"


class V4L2CtlGateway:
    """DeviceGateway backed by the v4l2-ctl command-line utility."""

    def __init__(self, executable: str = DEFAULT_EXECUTABLE, timeout: Optional[float] = None):
        """Initialize the gateway.

        Args:
            executable: Name or path of the v4l2-ctl binary
            timeout: Optional per-call timeout in seconds (default: wait forever)
        """
        self.executable = executable
        self.timeout = timeout

    def _run(self, device: str, *args: str) -> str:
        command: List[str] = [self.executable, f"--device={device}", *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise GatewayError(f"Failed to run {self.executable}: {e}") from e

        if result.returncode != 0:
            raise GatewayError(
                f"{self.executable} {' '.join(args)} failed for {device} "
                f"(exit {result.returncode}): {result.stderr.strip()}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result.stdout

    def query_info(self, device: str) -> str:
        """Return the `--info` text for a device.

        Raises:
            GatewayError: If v4l2-ctl cannot be run or fails
        """
        return self._run(device, "--info")

    def query_formats(self, device: str) -> str:
        """Return the `--list-formats-ext` text for a device."""
        return self._run(device, "--list-formats-ext")

    def query_controls(self, device: str) -> str:
        """Return the `--all` control dump for a device."""
        return self._run(device, "--all")

    def set_control(self, device: str, name: str, value: str) -> None:
        """Set one control on a device.

        Args:
            device: Device node path
            name: Control name
            value: Value in v4l2-ctl wire form

        Raises:
            GatewayError: If the driver rejects the value
        """
        self._run(device, f"--set-ctrl={name}={value}")
