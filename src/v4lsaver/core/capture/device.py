"""Device Manager for enumerating and resolving V4L2 capture devices.

This module provides the DeviceManager class which handles video node
enumeration, resolution of a user-supplied device path or serial number to a
concrete node, and the per-device metadata used by the snapshot store and the
device catalog.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import List, Optional

from v4lsaver.core.capture.formats import summarize_formats
from v4lsaver.core.errors import DeviceNotFoundError, GatewayError
from v4lsaver.core.gateway import DeviceGateway, parse_device_info
from v4lsaver.core.models import DeviceDescription, DeviceInfo, FormatSummary

logger = logging.getLogger(__name__)

DEFAULT_DEV_DIR = Path("/dev")

_NODE_NAME = re.compile(r"^video(\d+)$")
_BY_ID_VENDOR = re.compile(r"^usb-([^_]*)")


class DeviceManager:
    """Enumerates video nodes and queries them through a gateway.

    Nothing is cached: every call goes back to the filesystem and the
    gateway, since device paths can change between invocations.
    """

    def __init__(self, gateway: DeviceGateway, dev_dir: Path = DEFAULT_DEV_DIR):
        """Initialize the DeviceManager.

        Args:
            gateway: Gateway used for every device query
            dev_dir: Directory holding the video nodes (default: /dev)
        """
        self.gateway = gateway
        self.dev_dir = Path(dev_dir)
        self._path_pattern = re.compile(rf"^{re.escape(str(self.dev_dir))}/video[0-9]+$")

    @staticmethod
    def _is_char_device(path: Path) -> bool:
        return path.is_char_device()

    def is_device_path(self, token: str) -> bool:
        """Check whether a token has the shape of a video node path."""
        return bool(self._path_pattern.match(token))

    def list_nodes(self) -> List[str]:
        """Get all character-device video nodes in ascending numeric order.

        Returns:
            Device paths such as ``/dev/video0``; empty when none exist.
        """
        nodes = []
        for candidate in self.dev_dir.glob("video*"):
            match = _NODE_NAME.match(candidate.name)
            if match and self._is_char_device(candidate):
                nodes.append((int(match.group(1)), str(candidate)))
        return [path for _, path in sorted(nodes)]

    def get_info(self, device: str) -> DeviceInfo:
        """Query identity fields for a device.

        Gateway failures are logged and yield a DeviceInfo with no fields.
        """
        try:
            text = self.gateway.query_info(device)
        except GatewayError as e:
            logger.debug(f"Info query failed for {device}: {e}")
            return DeviceInfo(path=device)
        return parse_device_info(device, text)

    def get_format_summary(self, device: str) -> FormatSummary:
        """Query and summarize a device's capture formats.

        Gateway failures are treated as an empty listing (unusable device).
        """
        try:
            text = self.gateway.query_formats(device)
        except GatewayError as e:
            logger.debug(f"Format query failed for {device}: {e}")
            text = ""
        return summarize_formats(text)

    def find_by_serial(self, serial: str) -> Optional[str]:
        """Return the first node whose reported serial equals ``serial``."""
        for device in self.list_nodes():
            if self.get_info(device).serial == serial:
                return device
        return None

    def resolve(self, token: Optional[str] = None) -> List[str]:
        """Resolve an optional device path or serial number to device paths.

        Args:
            token: Device path, serial number, or None for every node

        Returns:
            Exactly one path when a token was given, otherwise every node.

        Raises:
            DeviceNotFoundError: If a token was given and nothing matches it
        """
        if not token:
            return self.list_nodes()

        if self.is_device_path(token):
            if self._is_char_device(Path(token)):
                return [token]
            raise DeviceNotFoundError(f"Device {token} not found")

        device = self.find_by_serial(token)
        if device is None:
            raise DeviceNotFoundError(f"No device found with serial number {token}")
        logger.info(f"Found device {device} for serial number {token}")
        return [device]

    def _by_id_vendor(self, device: str) -> Optional[str]:
        """Derive a vendor name from the /dev/v4l/by-id link to a node."""
        by_id = self.dev_dir / "v4l" / "by-id"
        if not by_id.is_dir():
            return None

        target_name = os.path.basename(device)
        for link in sorted(by_id.iterdir()):
            if not link.is_symlink():
                continue
            if os.path.basename(os.readlink(link)) != target_name:
                continue
            match = _BY_ID_VENDOR.match(link.name)
            if match and match.group(1):
                return match.group(1).replace("-", " ")
            return None
        return None

    def describe(self, device: str) -> DeviceDescription:
        """Collect identity, format summary and display vendor for a node."""
        info = self.get_info(device)
        summary = self.get_format_summary(device)
        return DeviceDescription(
            info=info,
            summary=summary,
            display_vendor=self._by_id_vendor(device) or info.vendor,
        )

    def describe_all(self) -> List[DeviceDescription]:
        """Describe every video node.

        Returns:
            One DeviceDescription per node, in node order.
        """
        descriptions = [self.describe(device) for device in self.list_nodes()]
        logger.debug(f"Described {len(descriptions)} video device(s)")
        return descriptions
