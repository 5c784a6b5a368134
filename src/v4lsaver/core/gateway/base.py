"""Device control gateway protocol.

The gateway is the only place that talks to the device-control utility.
Everything above it works on the text it returns, so tests can substitute
a fake that serves canned output.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DeviceGateway(Protocol):
    """Query and command interface for one video device node.

    Query methods return the utility's raw text. All methods raise
    GatewayError when the underlying call fails.
    """

    def query_info(self, device: str) -> str:
        """Return device metadata text (card type, bus info, serial)."""
        ...

    def query_formats(self, device: str) -> str:
        """Return the extended capture-format listing."""
        ...

    def query_controls(self, device: str) -> str:
        """Return the current control dump, one control per line."""
        ...

    def set_control(self, device: str, name: str, value: str) -> None:
        """Set one control to the literal value text."""
        ...
