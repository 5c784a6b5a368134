"""Device control gateway: the v4l2-ctl boundary and its text parsers."""

from v4lsaver.core.gateway.base import DeviceGateway
from v4lsaver.core.gateway.parsers import parse_control_line, parse_controls, parse_device_info
from v4lsaver.core.gateway.v4l2 import V4L2CtlGateway

__all__ = [
    "DeviceGateway",
    "V4L2CtlGateway",
    "parse_control_line",
    "parse_controls",
    "parse_device_info",
]
