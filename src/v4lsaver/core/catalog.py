"""Device catalog rendering.

Builds the ``list`` table and the ``list-json`` document from
DeviceDescription records. Both views are assembled from structured rows and
serialized once.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from v4lsaver.core.models import DeviceDescription, FormatStatus

# Column widths carried over from the fixed-width listing
SERIAL_WIDTH = 8
VENDOR_WIDTH = 15
CARD_WIDTH = 35

_UNUSABLE_SUFFIX = {
    FormatStatus.NO_RESOLUTIONS: " [PROBABLY NOT USABLE]",
    FormatStatus.UNPARSEABLE: " [PROBABLY NOT USABLE - cannot parse formats]",
    FormatStatus.NO_FORMATS: " [PROBABLY NOT USABLE - no capture formats]",
}


def _clip(value: Optional[str], width: int) -> str:
    return escape(value[:width]) if value else ""


def format_info(description: DeviceDescription) -> str:
    """One-line summary of a device's first format.

    Examples:
        ``MJPG up to 1920x1080@30fps (+1 more formats)``
        ``GREY (no resolutions found) [PROBABLY NOT USABLE]``
    """
    summary = description.summary
    if not summary.formats:
        return _UNUSABLE_SUFFIX[summary.status].lstrip()

    first = summary.formats[0]
    if first.max_resolution is None:
        text = f"{first.name} (no resolutions found)"
    elif first.max_fps is not None:
        text = f"{first.name} up to {first.max_resolution}@{first.max_fps:g}fps"
    else:
        text = f"{first.name} up to {first.max_resolution}"

    if len(summary.formats) > 1:
        text += f" (+{len(summary.formats) - 1} more formats)"

    if not summary.usable:
        text += _UNUSABLE_SUFFIX[summary.status]
    return text


def build_table(descriptions: Sequence[DeviceDescription]) -> Table:
    """Build the device table, usable devices first, each group in node order."""
    table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
    table.add_column("Device", no_wrap=True)
    table.add_column("SN", no_wrap=True)
    table.add_column("Vendor", no_wrap=True)
    table.add_column("Card Type", no_wrap=True)
    table.add_column("Format Info")

    ordered = sorted(descriptions, key=lambda d: not d.usable)
    for description in ordered:
        info = description.info
        table.add_row(
            escape(info.path),
            _clip(info.serial, SERIAL_WIDTH),
            _clip(description.display_vendor, VENDOR_WIDTH),
            _clip(info.card_type, CARD_WIDTH),
            escape(format_info(description)),
            style=None if description.usable else "dim",
        )
    return table


def print_table(
    descriptions: Sequence[DeviceDescription], console: Optional[Console] = None
) -> None:
    """Print the device table to stdout (or the given console)."""
    console = console or Console()
    console.print(build_table(descriptions))


def build_document(descriptions: Sequence[DeviceDescription]) -> Dict[str, Any]:
    """Build the structured device listing."""
    devices: List[Dict[str, Any]] = []
    for description in descriptions:
        info = description.info
        devices.append(
            {
                "device": info.path,
                "serial": info.serial,
                "vendor": description.display_vendor,
                "card_type": info.card_type,
                "usable": description.usable,
                "formats": [fmt.to_dict() for fmt in description.summary.formats],
            }
        )
    return {"devices": devices}


def render_json(descriptions: Sequence[DeviceDescription]) -> str:
    """Serialize the structured device listing."""
    return json.dumps(build_document(descriptions), indent=2, ensure_ascii=False)
