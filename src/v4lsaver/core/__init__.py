"""Core device discovery, gateway and snapshot logic."""

from v4lsaver.core.capture import DeviceManager
from v4lsaver.core.gateway import DeviceGateway, V4L2CtlGateway
from v4lsaver.core.settings import ControlSnapshotStore

__all__ = ["ControlSnapshotStore", "DeviceGateway", "DeviceManager", "V4L2CtlGateway"]
