"""Parsers for v4l2-ctl info and control-dump text.

v4l2-ctl prints human-readable output, so these are best-effort: lines
that do not match are ignored rather than treated as errors.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from v4lsaver.core.models import DeviceInfo

# "  brightness 0x00980900 (int)    : min=-64 max=64 default=0 value=0"
# "  brightness (int) 0 ..."  (older dumps)
_CONTROL_LINE = re.compile(
    r"^\s*(?P<name>[A-Za-z0-9_]+)\s+(?:0x[0-9A-Fa-f]+\s+)?"
    r"\((?P<type>[^)]*)\)\s*:?\s*(?P<rest>.*)$"
)
_VALUE_FIELD = re.compile(r"(?:^|\s)value=(?P<value>\S+)")


def _field_value(line: str) -> Optional[str]:
    """Return the text after the first ': ' of a 'Key : value' line."""
    _, sep, value = line.partition(": ")
    if not sep:
        return None
    value = value.strip()
    return value or None


def parse_device_info(device: str, text: str) -> DeviceInfo:
    """Extract card type, vendor and serial from ``--info`` output.

    Args:
        device: Device path the text was queried for
        text: Raw ``v4l2-ctl --info`` output

    Returns:
        DeviceInfo with absent fields left as None
    """
    info = DeviceInfo(path=device)
    for line in text.splitlines():
        lowered = line.lower()
        if info.card_type is None and "card type" in lowered:
            info.card_type = _field_value(line)
        elif info.vendor is None and ("bus info" in lowered or "vendor" in lowered):
            info.vendor = _field_value(line)
        elif info.serial is None and "serial" in lowered:
            info.serial = _field_value(line)
    return info


def parse_control_line(line: str) -> Optional[Tuple[str, str, str]]:
    """Parse one control-dump line into (name, type_tag, value_text).

    The value is taken from a ``value=`` field when present, otherwise from
    the first token after the parenthesized type.
    """
    match = _CONTROL_LINE.match(line)
    if match is None:
        return None

    rest = match.group("rest")
    value_match = _VALUE_FIELD.search(rest)
    if value_match:
        value = value_match.group("value")
    else:
        tokens = rest.split()
        if not tokens:
            return None
        value = tokens[0]

    return match.group("name"), match.group("type").strip(), value


def parse_controls(text: str) -> Dict[str, Tuple[str, str]]:
    """Map control name to (type_tag, value_text) for every parsable line.

    When a name appears twice the first occurrence wins.
    """
    controls: Dict[str, Tuple[str, str]] = {}
    for line in text.splitlines():
        parsed = parse_control_line(line)
        if parsed is None:
            continue
        name, type_tag, value = parsed
        controls.setdefault(name, (type_tag, value))
    return controls
