"""Core data models for v4l-saver.

This module contains the value objects, enums and dataclasses shared by the
gateway, the format summarizer, the snapshot store and the device catalog.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

# Controls that are ever saved or restored, in file order.
ALLOWED_CONTROLS: Tuple[str, ...] = (
    "brightness",
    "contrast",
    "saturation",
    "white_balance_automatic",
    "gain",
    "power_line_frequency",
    "white_balance_temperature",
    "sharpness",
    "backlight_compensation",
    "auto_exposure",
    "exposure_time_absolute",
    "exposure_dynamic_framerate",
    "pan_absolute",
    "tilt_absolute",
    "focus_absolute",
    "focus_automatic_continuous",
    "zoom_absolute",
)

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")

# ============================================================================
# Basic Value Objects
# ============================================================================


@dataclass(frozen=True)
class Resolution:
    """Video resolution."""

    width: int
    height: int

    def __str__(self) -> str:
        """String representation."""
        return f"{self.width}x{self.height}"

    def to_tuple(self) -> Tuple[int, int]:
        """Convert to (width, height) tuple."""
        return (self.width, self.height)


@dataclass(frozen=True)
class IntegerValue:
    """Control value reported as an integer."""

    value: int

    def to_wire(self) -> str:
        """Render as a v4l2-ctl argument, e.g. ``-5``."""
        return str(self.value)

    def to_json(self) -> int:
        """Snapshot form: a JSON integer."""
        return self.value


@dataclass(frozen=True)
class StringValue:
    """Control value reported as free text (menu labels, odd drivers)."""

    value: str

    def to_wire(self) -> str:
        """Render as a v4l2-ctl argument, unquoted."""
        return self.value

    def to_json(self) -> str:
        """Snapshot form: a JSON string."""
        return self.value


ControlValue = Union[IntegerValue, StringValue]


def classify_value(text: str) -> ControlValue:
    """Tag a value token as integer when it is wholly ``-?[0-9]+``."""
    if _INTEGER_PATTERN.fullmatch(text):
        return IntegerValue(int(text))
    return StringValue(text)


def value_from_json(raw: Any) -> Optional[ControlValue]:
    """Rebuild a tagged value from its JSON form.

    Returns:
        The tagged value, or None when the stored value has no usable form.
    """
    if isinstance(raw, bool):
        return IntegerValue(int(raw))
    if isinstance(raw, int):
        return IntegerValue(raw)
    if isinstance(raw, str) and raw:
        return StringValue(raw)
    return None


# ============================================================================
# Enums
# ============================================================================


class FormatStatus(Enum):
    """Outcome of summarizing a device's format listing."""

    USABLE = "usable"
    NO_FORMATS = "no capture formats"
    UNPARSEABLE = "cannot parse formats"
    NO_RESOLUTIONS = "no resolutions found"


class DeviceOutcome(Enum):
    """Terminal state of a single device in a save or load run."""

    SAVED = "saved"
    LOADED = "loaded"
    SKIPPED_UNUSABLE = "skipped_unusable"
    SKIPPED_NO_SERIAL = "skipped_no_serial"
    WRITE_FAILED = "write_failed"
    SERIAL_MISMATCH = "serial_mismatch"
    INVALID_RECORD = "invalid_record"
    NO_SAVED_CONTROLS = "no_saved_controls"


class SnapshotSource(Enum):
    """On-disk form a load was read from."""

    SERIAL = "serial"
    LEGACY_JSON = "legacy_json"
    LEGACY_CTRLS = "legacy_ctrls"


# ============================================================================
# Device Models
# ============================================================================


@dataclass
class DeviceInfo:
    """Identity fields reported by the gateway for one device node."""

    path: str
    serial: Optional[str] = None
    card_type: Optional[str] = None
    vendor: Optional[str] = None


@dataclass
class FormatDescriptor:
    """Best capture mode advertised for one pixel format."""

    name: str
    max_resolution: Optional[Resolution] = None
    max_fps: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.name,
            "max_resolution": str(self.max_resolution) if self.max_resolution else None,
            "max_fps": self.max_fps,
        }


@dataclass
class FormatSummary:
    """Ordered format descriptors for a device plus its usability verdict."""

    formats: List[FormatDescriptor] = field(default_factory=list)
    status: FormatStatus = FormatStatus.NO_FORMATS

    @property
    def usable(self) -> bool:
        """A device is usable when any format has a discrete resolution."""
        return self.status == FormatStatus.USABLE


@dataclass
class DeviceDescription:
    """Everything the device catalog shows about one node."""

    info: DeviceInfo
    summary: FormatSummary
    display_vendor: Optional[str] = None

    @property
    def path(self) -> str:
        """Device node path."""
        return self.info.path

    @property
    def usable(self) -> bool:
        """Whether the device can capture video."""
        return self.summary.usable


# ============================================================================
# Snapshot Models
# ============================================================================


@dataclass
class ControlSetting:
    """One captured control: tagged value plus the gateway's type annotation."""

    name: str
    value: ControlValue
    type_tag: str = ""


@dataclass
class SnapshotRecord:
    """Saved control values for one physical device, keyed by serial."""

    device: str
    serial: Optional[str]
    timestamp: str
    card_type: Optional[str] = None
    vendor: Optional[str] = None
    controls: Dict[str, ControlSetting] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the on-disk JSON schema."""
        return {
            "device": self.device,
            "serial": self.serial,
            "timestamp": self.timestamp,
            "card_type": self.card_type,
            "vendor": self.vendor,
            "controls": {
                name: {"value": setting.value.to_json(), "type": setting.type_tag}
                for name, setting in self.controls.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SnapshotRecord:
        """Deserialize from the on-disk JSON schema.

        Controls whose entry is not an object or whose value has no usable
        form are dropped here; callers decide which names to apply.

        Raises:
            ValueError: If the document is not a JSON object.
        """
        if not isinstance(data, dict):
            raise ValueError("Snapshot root must be a JSON object")

        controls: Dict[str, ControlSetting] = {}
        raw_controls = data.get("controls") or {}
        if not isinstance(raw_controls, dict):
            raise ValueError("Snapshot 'controls' must be a JSON object")

        for name, entry in raw_controls.items():
            if not isinstance(entry, dict):
                continue
            value = value_from_json(entry.get("value"))
            if value is None:
                continue
            controls[name] = ControlSetting(
                name=name, value=value, type_tag=str(entry.get("type") or "")
            )

        serial = data.get("serial")
        return cls(
            device=str(data.get("device") or ""),
            serial=str(serial) if serial is not None else None,
            timestamp=str(data.get("timestamp") or ""),
            card_type=data.get("card_type"),
            vendor=data.get("vendor"),
            controls=controls,
        )


# ============================================================================
# Operation Results
# ============================================================================


@dataclass
class SaveResult:
    """Outcome of saving one device."""

    device: str
    outcome: DeviceOutcome
    serial: Optional[str] = None
    path: Optional[str] = None
    count: int = 0


@dataclass
class LoadResult:
    """Outcome of loading one device."""

    device: str
    outcome: DeviceOutcome
    serial: Optional[str] = None
    path: Optional[str] = None
    source: Optional[SnapshotSource] = None
    applied: int = 0
    failed: List[str] = field(default_factory=list)
