"""Shared fixtures: an in-memory gateway and a throwaway /dev directory."""

from pathlib import Path
from unittest.mock import patch

import pytest

from v4lsaver.core.capture import DeviceManager
from v4lsaver.core.errors import GatewayError

INFO_TEMPLATE = """Driver Info:
\tDriver name      : uvcvideo
\tCard type        : {card}
\tBus info         : {bus}
\tDriver version   : 6.8.12
\tCapabilities     : 0x84a00001
Media Driver Info:
\tDriver name      : uvcvideo
\tModel            : {card}
{serial_line}"""

USABLE_FORMATS = """ioctl: VIDIOC_ENUM_FMT
\tType: Video Capture

\t[0]: 'MJPG' (Motion-JPEG, compressed)
\t\tSize: Discrete 640x480
\t\t\tInterval: Discrete 0.033s (30.000 fps)
\t\tSize: Discrete 1920x1080
\t\t\tInterval: Discrete 0.033s (30.000 fps)
\t\t\tInterval: Discrete 0.067s (15.000 fps)
\t\tSize: Discrete 1280x720
\t\t\tInterval: Discrete 0.017s (60.000 fps)
\t[1]: 'YUYV' (YUYV 4:2:2)
\t\tSize: Discrete 640x480
\t\t\tInterval: Discrete 0.033s (30.000 fps)
\t\tSize: Discrete 1920x1080
\t\t\tInterval: Discrete 0.200s (5.000 fps)
"""

METADATA_FORMATS = """ioctl: VIDIOC_ENUM_FMT
\tType: Metadata Capture

\t[0]: 'UVCH' (UVC Payload Header Metadata)
"""

CONTROLS_DUMP = """Driver Info:
\tDriver name      : uvcvideo
\tCard type        : HD Pro Webcam C920

User Controls

                     brightness 0x00980900 (int)    : min=0 max=255 step=1 default=128 value=140
                       contrast 0x00980901 (int)    : min=0 max=255 step=1 default=128 value=128
                     saturation 0x00980902 (int)    : min=0 max=255 step=1 default=128 value=96
        white_balance_automatic 0x0098090c (bool)   : default=1 value=0
           power_line_frequency 0x00980918 (menu)   : min=0 max=2 default=2 value=1 (50 Hz)
\t\t\t\t0: Disabled
\t\t\t\t1: 50 Hz
\t\t\t\t2: 60 Hz
      white_balance_temperature 0x0098091a (int)    : min=2000 max=6500 step=1 default=4000 value=4500
         low_light_compensation 0x009a0912 (bool)   : default=0 value=1

Camera Controls

                  auto_exposure 0x009a0901 (menu)   : min=0 max=3 default=3 value=1 (Manual Mode)
         exposure_time_absolute 0x009a0902 (int)    : min=3 max=2047 step=1 default=250 value=-5
                   pan_absolute 0x009a0908 (int)    : min=-36000 max=36000 step=3600 default=0 value=0
"""


class FakeGateway:
    """In-memory DeviceGateway serving canned v4l2-ctl text."""

    def __init__(self):
        self.info = {}
        self.formats = {}
        self.controls = {}
        self.fail_controls = set()
        self.queries = []
        self.set_calls = []

    def add_device(
        self,
        device,
        serial="SN0001",
        card="HD Pro Webcam C920",
        bus="usb-0000:00:14.0-1",
        formats=USABLE_FORMATS,
        controls=CONTROLS_DUMP,
    ):
        serial_line = f"\tSerial           : {serial}\n" if serial else ""
        self.info[device] = INFO_TEMPLATE.format(card=card, bus=bus, serial_line=serial_line)
        self.formats[device] = formats
        self.controls[device] = controls

    def _lookup(self, table, kind, device):
        self.queries.append((kind, device))
        if device not in table:
            raise GatewayError(f"Cannot open device {device}", returncode=1)
        return table[device]

    def query_info(self, device):
        return self._lookup(self.info, "info", device)

    def query_formats(self, device):
        return self._lookup(self.formats, "formats", device)

    def query_controls(self, device):
        return self._lookup(self.controls, "controls", device)

    def set_control(self, device, name, value):
        self.set_calls.append((device, name, value))
        if name in self.fail_controls:
            raise GatewayError(f"VIDIOC_S_EXT_CTRLS: failed: {name}", returncode=255)


@pytest.fixture
def fake_gateway():
    """Create an empty FakeGateway."""
    return FakeGateway()


@pytest.fixture
def dev_dir(tmp_path):
    """Create a directory standing in for /dev.

    Plain files play the part of character devices.
    """
    directory = tmp_path / "dev"
    directory.mkdir()
    with patch.object(
        DeviceManager, "_is_char_device", side_effect=lambda path: Path(path).exists()
    ):
        yield directory


@pytest.fixture
def add_device(fake_gateway, dev_dir):
    """Create a video node and register it with the fake gateway.

    Returns:
        Callable(index, **gateway_kwargs) -> device path
    """

    def _add(index, **kwargs):
        node = dev_dir / f"video{index}"
        node.touch()
        fake_gateway.add_device(str(node), **kwargs)
        return str(node)

    return _add


@pytest.fixture
def device_manager(fake_gateway, dev_dir):
    """Create a DeviceManager over the fake gateway and fake /dev."""
    return DeviceManager(fake_gateway, dev_dir=dev_dir)


@pytest.fixture
def sample_formats():
    return USABLE_FORMATS


@pytest.fixture
def metadata_formats():
    return METADATA_FORMATS


@pytest.fixture
def controls_dump():
    return CONTROLS_DUMP
